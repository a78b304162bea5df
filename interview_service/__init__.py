"""
Interview assessment service: question generation, per-answer scoring and
aggregate assessment over an LLM, exposed as a FastAPI app.
"""

__version__ = "1.0.0"
