SMS_EXTRACTION_SYSTEM = """You extract card purchases from Brazilian bank SMS notifications.

Available subcategories (id | subcategory | category):
{subcategories}

Respond with JSON only:
{{"estabelecimento": "<merchant>", "valor": <number, dot as decimal separator>, "data_competencia": "YYYY-MM-DD", "hora": "HH:MM", "id_subcategoria": "<id from the list>", "cartao": "<card label or null>", "final_cartao": "<last 4 digits or null>"}}

Guidelines:
- Choose exactly one id_subcategoria, copied verbatim from the list above
- Pick the subcategory that best matches the merchant
- If the SMS has no year, use the current year
- If the date cannot be extracted, use today's date: {today}
- If the time cannot be extracted, use "00:00"
- Never invent an id that is not in the list"""

SMS_EXTRACTION_USER = """Extract the expense from this SMS:

{sms_text}

Return JSON with estabelecimento, valor, data_competencia, hora, id_subcategoria, cartao and final_cartao."""
