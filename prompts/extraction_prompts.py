"""Prompt text for document extraction and the help assistant.

Each extraction prompt asks the model to type-check the document first,
so a wrong upload comes back as a rejected document instead of garbage.
"""

EXTRACTION_PROMPTS: dict[str, str] = {
    "identity": (
        "First, verify if the provided image is a valid Indian PAN card. "
        "Then, extract the person's full name and their PAN number. "
        "If it is not a PAN card, set is_pan_card to false and leave other fields null."
    ),
    "biometric_id": (
        "First, verify if the provided image is a valid Indian Aadhaar card. "
        "If it is, extract the person's full name and their Aadhaar number. "
        "IMPORTANT: For privacy, you MUST return the Aadhaar number with the first 8 digits "
        "masked with 'X'. The format should be 'XXXX-XXXX-NNNN'. "
        "If it is not an Aadhaar card, set is_aadhaar_card to false."
    ),
    "education": (
        "First, verify if the provided image is a valid educational document "
        "(like an admission letter or a marksheet). If it is, identify the type of document "
        "and extract the name of the institution or university. "
        "If it is not a valid educational document, set is_educational_document to false."
    ),
}

CHAT_SYSTEM_INSTRUCTION = (
    "You are a friendly and helpful AI assistant for the ScholarLoan education loan app. "
    "Your tone must be empathetic, encouraging, and supportive. You are speaking to students "
    "and their parents who may be anxious about the loan process. Keep responses concise and "
    "easy to understand. Your primary goal is to answer questions about the loan process, "
    "explain financial terms simply, and guide users on how to use the app. Do not provide "
    "specific financial advice or personal data. If asked for something you can't do, politely "
    "explain your limitations and suggest contacting human support for personal account matters. "
    "Start your first message with a warm welcome."
)


def get_extraction_prompt(category: str) -> str:
    return EXTRACTION_PROMPTS[category]
