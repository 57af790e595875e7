import json

from langchain_core.prompts import PromptTemplate

from app.ai.mapper import get_field_mapping
from app.models.flashcard_session import GenerationMode
from app.schemas.ai import GenerateFlashcardsRequest

SYSTEM_PROMPT = """\
You are an expert educational content creator specializing in generating high-quality flashcards for effective learning. Your task is to create flashcards that follow best practices in cognitive science and active recall.

CORE PRINCIPLES:
{principles}

OUTPUT FORMAT:
Always respond with valid JSON in this exact structure. Do not add any prose and do not wrap the JSON in markdown code fences.
{schema}
"""

USER_PROMPT = """\
Generate {count} flashcards about {topic}.

Requirements:
- Subject: {topic}
- Difficulty Level: {difficulty}
- Number of Cards: {count}
{extra_requirements}- {question_types}
- Ensure comprehensive coverage of key concepts

Return exactly {count} flashcards."""

MODE_PRINCIPLES = {
    GenerationMode.generic: (
        "- Use active recall techniques\n"
        "- Create clear, concise questions\n"
        "- Ensure answers are specific and accurate\n"
        "- Apply the minimum information principle (one concept per card)\n"
        "- Use varied question formats to enhance retention"
    ),
    GenerationMode.vocabulary: (
        "- One German word or fixed phrase per card\n"
        "- Give nouns with their article (der/die/das)\n"
        "- Keep the English meaning short and precise\n"
        "- Write a natural example sentence that shows typical usage"
    ),
}

MODE_QUESTION_TYPES = {
    GenerationMode.generic: "Question Types: mix of definitions, explanations, and applications",
    GenerationMode.vocabulary: "Word Types: mix of nouns, verbs, adjectives and common expressions",
}

_system_template = PromptTemplate.from_template(SYSTEM_PROMPT)
_user_template = PromptTemplate.from_template(USER_PROMPT)


def build_output_schema(mode: GenerationMode) -> str:
    """Render the JSON envelope the response normalizer and mapper expect."""
    mapping = get_field_mapping(mode)
    example = {
        "flashcards": [
            {
                mapping.front_keys[0]: mapping.front_hint,
                mapping.back_keys[0]: mapping.back_hint,
                mapping.info_keys[0]: mapping.info_hint,
                "difficulty": "easy|medium|hard",
            }
        ]
    }
    return json.dumps(example, indent=2)


def build_prompts(request: GenerateFlashcardsRequest) -> tuple[str, str]:
    """Return ``(system_prompt, user_prompt)`` for a generation request."""
    extra = ""
    if request.category:
        extra += f"- Category: {request.category}\n"
    if request.additional_context:
        extra += f"- Additional Context: {request.additional_context}\n"

    system_prompt = _system_template.format(
        principles=MODE_PRINCIPLES[request.mode],
        schema=build_output_schema(request.mode),
    )
    user_prompt = _user_template.format(
        topic=request.topic,
        count=request.count,
        difficulty=request.difficulty.value,
        extra_requirements=extra,
        question_types=MODE_QUESTION_TYPES[request.mode],
    )
    return system_prompt, user_prompt
