"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Build prompts from saved preferences and recommended vehicles.
- Ask Groq for a short reason per vehicle.
- Graceful fallback when the LLM is unavailable or returns invalid output.
"""
