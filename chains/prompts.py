from typing import Sequence

from langchain_core.prompts import ChatPromptTemplate

SYSTEM_BASE = """You are an expert RV repair technician with decades of experience.
Your task is to provide clear, step-by-step repair instructions based on the provided context.

Guidelines:
- Always prioritize safety first
- Provide specific, actionable steps
- Include any necessary tools or parts
- Mention safety precautions where applicable
- If the context doesn't contain enough information, say so clearly
- Use clear, technical language that RV technicians would understand

Format your response as a numbered list of steps."""

REPAIR_TEMPLATE = ChatPromptTemplate.from_messages(
    [
        ("system", SYSTEM_BASE),
        (
            "human",
            "Question: {question}\n\n"
            "Context from RV repair manuals:\n{context}\n\n"
            "Please provide step-by-step repair instructions based on this context.",
        ),
    ]
)

NO_CONTEXT_ANSWER = (
    "I apologize, but I could not find any relevant information in our RV repair "
    "manuals to answer your question. Please try rephrasing your question or "
    "contact a qualified RV technician for assistance."
)


def format_context(blocks: Sequence[str]) -> str:
    return "\n\n".join(f"{i}. {b}" for i, b in enumerate(blocks, start=1))
