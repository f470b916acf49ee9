"""
Canned health-query answers used when the AI model is not configured or
returns no text. Emergency keywords are checked first, then a few common
topics, then a general answer that echoes the question.
"""

EMERGENCY_KEYWORDS = (
    "chest pain",
    "difficulty breathing",
    "severe headache",
    "stroke",
    "heart attack",
    "emergency",
    "urgent",
    "severe pain",
    "bleeding",
    "unconscious",
    "suicide",
    "overdose",
)

EMERGENCY_RESPONSE = """EMERGENCY RESPONSE NEEDED

Based on your query, this may be a medical emergency. Please:

1. Call emergency services immediately (911 in US, 999 in UK, 112 in EU)
2. Seek immediate medical attention at the nearest emergency room
3. Do not delay, time is critical in medical emergencies

If you are experiencing:
- Chest pain or difficulty breathing
- Signs of stroke (sudden weakness, speech problems, facial drooping)
- Severe allergic reactions
- Thoughts of self-harm

Please contact emergency services immediately.

This AI assistant cannot provide emergency medical care. Professional medical help is essential for your safety."""

HEADACHE_RESPONSE = """Headache Information

Headaches can have various causes including:
- Tension and stress
- Dehydration
- Poor sleep
- Eye strain
- Certain foods or medications

General recommendations:
- Stay hydrated
- Get adequate sleep (7-9 hours)
- Manage stress through relaxation techniques
- Maintain regular meal times
- Limit screen time

When to see a doctor:
- Sudden, severe headaches
- Headaches with fever, stiff neck, or vision changes
- Frequent or worsening headaches
- Headaches after head injury

Important: This information is for educational purposes only. Please consult a healthcare professional for proper diagnosis and treatment."""

FEVER_RESPONSE = """Fever Information

Fever is often a sign that your body is fighting an infection.

General care for mild fever:
- Rest and stay hydrated
- Use fever-reducing medications as directed
- Wear light clothing
- Take lukewarm baths

When to seek medical care:
- Fever over 103F (39.4C)
- Fever lasting more than 3 days
- Difficulty breathing or chest pain
- Severe headache or stiff neck
- Signs of dehydration
- In infants under 3 months: any fever

Important: This is general information only. Always consult healthcare professionals for proper medical evaluation."""

GENERAL_RESPONSE = """Health Information Response

Thank you for your health question. While I can provide general health information, it's important to understand that:

Professional Medical Consultation is Essential:
- This AI assistant provides general information only
- Individual health situations are unique
- Proper diagnosis requires medical examination
- Treatment should be supervised by healthcare professionals

General Health Recommendations:
- Maintain a balanced diet with fruits and vegetables
- Exercise regularly (at least 150 minutes moderate activity per week)
- Get adequate sleep (7-9 hours for adults)
- Stay hydrated
- Manage stress through healthy coping mechanisms
- Keep up with preventive care and regular check-ups

When to Seek Medical Care:
- Persistent or worsening symptoms
- Sudden onset of severe symptoms
- Any concerns about your health
- Changes in existing conditions

For your specific question about: "{query}"

I recommend discussing this with a qualified healthcare provider who can:
- Evaluate your individual situation
- Consider your medical history
- Perform appropriate examinations
- Provide personalized medical advice

Remember: Your health is important, and professional medical guidance is always the best approach for health concerns."""

# (keywords, answer) checked in order after the emergency keywords
TOPIC_RESPONSES = (
    (("headache", "migraine"), HEADACHE_RESPONSE),
    (("fever", "temperature"), FEVER_RESPONSE),
)


def is_emergency(query: str) -> bool:
    lowered = query.lower()
    return any(keyword in lowered for keyword in EMERGENCY_KEYWORDS)


def fallback_health_response(query: str) -> str:
    """Pick a canned answer for ``query``."""
    if is_emergency(query):
        return EMERGENCY_RESPONSE

    lowered = query.lower()
    for keywords, answer in TOPIC_RESPONSES:
        if any(keyword in lowered for keyword in keywords):
            return answer

    return GENERAL_RESPONSE.format(query=query)
