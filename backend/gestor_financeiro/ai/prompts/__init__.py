from gestor_financeiro.ai.prompts.sms_extraction import SMS_EXTRACTION_SYSTEM, SMS_EXTRACTION_USER

__all__ = [
    "SMS_EXTRACTION_SYSTEM",
    "SMS_EXTRACTION_USER",
]
