"""Google Gemini ``generateContent`` dialect."""
