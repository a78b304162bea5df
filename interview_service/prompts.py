# interview_service/prompts.py
from typing import List

from .schemas import AnswerAssessment

# ==========================================
# QUESTION GENERATION
# ==========================================

QUESTION_SCHEMA_EXAMPLE = """[
  {"level": "Easy", "question": "What is the difference between let, const, and var in JavaScript?", "time": 20},
  {"level": "Medium", "question": "Explain how React hooks manage state compared to class components?", "time": 60},
  {"level": "Hard", "question": "Design a caching strategy for a high-traffic REST API?", "time": 120}
]"""


def build_question_prompt(resume_text: str, skills_text: str, count: int = 5) -> str:
    context_section = ""
    if resume_text and resume_text.strip():
        context_section += f"RESUME/EXPERIENCE:\n{resume_text}\n\n"
    if skills_text and skills_text.strip():
        context_section += f"SKILLS/TECHNOLOGIES:\n{skills_text}\n"

    return f"""You are an expert technical interviewer. Based on the following candidate information, generate exactly {count} TECHNICAL interview questions.

{context_section}
Generate ONLY technical/programming questions related to:
- Technologies and frameworks mentioned in the resume or skills
- Programming languages used
- Technical concepts relevant to their experience
- System design (if applicable)
- Database and backend technologies
- Frontend frameworks and tools
- APIs and integrations
- Performance optimization
- Code quality and best practices

DO NOT include:
- Behavioral questions
- Soft skills questions
- Company/cultural fit questions
- Personal questions
- Any non-technical topics

Return ONLY a valid JSON array with no additional text. Each question must have this exact format:
{{
  "level": "Easy|Medium|Hard",
  "question": "The technical interview question text",
  "time": number (time in seconds for answering)
}}

Guidelines:
- Easy questions: 20-30 seconds (basic concepts, definitions)
- Medium questions: 45-90 seconds (implementation details, practical use)
- Hard questions: 90-180 seconds (system design, complex scenarios, optimization)
- Mix Easy, Medium and Hard questions
- ALL questions must be purely technical
- Questions should reference actual technologies from the provided information
- Return exactly {count} questions

Example format (return ONLY the JSON array, no markdown or extra text):
{QUESTION_SCHEMA_EXAMPLE}""".strip()


# ==========================================
# PER-ANSWER SCORING
# ==========================================

LEVEL_EXPECTATIONS = {
    "Easy": "Expect clear, basic understanding of fundamental concepts",
    "Medium": "Expect good understanding with some implementation details or practical application",
    "Hard": "Expect deep understanding, system thinking, optimization considerations, or complex scenarios",
}


def build_answer_prompt(question: str, answer: str, level: str) -> str:
    expectations = "\n".join(f"- {name}: {text}" for name, text in LEVEL_EXPECTATIONS.items())
    return f"""You are an expert technical interviewer evaluating a candidate's answer to an interview question.

QUESTION ({level} level):
{question}

CANDIDATE'S ANSWER:
{answer}

Evaluate the answer based on:
1. Technical accuracy and correctness
2. Depth of understanding (more depth expected for Hard questions, basics for Easy)
3. Clarity and coherence
4. Completeness of the response
5. Practical knowledge and examples (if applicable)

For {level} level questions:
{expectations}

Return ONLY a valid JSON object with this exact format (no markdown, no extra text):
{{
  "score": number (0-5, where 0=poor/incorrect, 2.5=average/partial, 5=excellent/complete),
  "feedback": "Detailed constructive feedback (3-4 sentences) highlighting what was good and what could be improved",
  "strengths": ["strength 1", "strength 2", "strength 3"],
  "weaknesses": ["weakness 1", "weakness 2", "weakness 3"]
}}

Be fair but thorough. Give partial credit for partially correct answers. Provide specific, actionable feedback.""".strip()


# ==========================================
# AGGREGATE ASSESSMENT
# ==========================================

def format_assessment_history(assessments: List[AnswerAssessment]) -> str:
    history_text = ""
    for i, item in enumerate(assessments, 1):
        history_text += f"""
Question {i} ({item.level}):
{item.question}

Answer:
{item.answer}

Score: {item.score}/5
Feedback: {item.feedback or "N/A"}
Strengths: {", ".join(item.strengths)}
Weaknesses: {", ".join(item.weaknesses)}
---"""
    return history_text


def build_aggregate_prompt(assessments: List[AnswerAssessment], total_score: float,
                           max_possible: int, final_score_out_of_50: float) -> str:
    history_text = format_assessment_history(assessments)
    return f"""You are an expert technical interviewer providing a comprehensive overall assessment of a candidate's interview performance.

INTERVIEW SUMMARY:
Total Questions: {len(assessments)}
Total Score: {total_score:.1f}/{max_possible} points
Final Score (out of 50): {final_score_out_of_50:.1f}/50

ALL QUESTIONS AND ASSESSMENTS:
{history_text}

Based on all the answers and assessments provided, generate a comprehensive overall assessment that includes:

1. Overall feedback: A detailed summary (5-7 sentences) evaluating the candidate's overall technical knowledge, performance patterns, key strengths demonstrated, areas needing improvement, and their potential for growth.

2. Overall strengths: List 4-6 key technical strengths demonstrated across all answers. Look for patterns and recurring themes rather than repeating individual question strengths.

3. Overall weaknesses: List 4-6 key areas where the candidate needs improvement or has knowledge gaps. Look for patterns across all answers.

4. Recommendation: A brief recommendation on the candidate's suitability (e.g., "Strong candidate suitable for mid-level position", "Good foundation but needs more experience before consideration").

Return ONLY a valid JSON object with this exact format (no markdown, no extra text):
{{
  "overallFeedback": "Detailed overall feedback text (5-7 sentences)",
  "overallStrengths": ["strength 1", "strength 2", "strength 3", "strength 4"],
  "overallWeaknesses": ["weakness 1", "weakness 2", "weakness 3", "weakness 4"],
  "recommendation": "Brief recommendation text"
}}

Focus on patterns and themes across all answers rather than individual question details. Provide actionable insights.""".strip()
