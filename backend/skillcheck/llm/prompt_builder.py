import json

from .scoring_schema import SCORING_SCHEMA


def build_voice_context(voice_metrics):
    if not voice_metrics:
        return ""
    wpm = voice_metrics.get("wpm")
    return f"""
Voice Delivery Metrics:
- Words per minute (WPM): {wpm if wpm is not None else "N/A"}
- Filler words detected (um, uh, like, so, actually, basically, right, yeah): {voice_metrics.get("filler_words") or 0}
- Long pauses (>2 seconds): {voice_metrics.get("long_pauses") or 0}

Consider these metrics when scoring delivery. A good delivery has:
- WPM between 120-160 (too slow or too fast affects clarity)
- Minimal filler words (0-2 is excellent, 3-5 is acceptable, 6+ needs improvement)
- Few long pauses (0-1 is excellent, 2-3 is acceptable, 4+ indicates hesitation or uncertainty)
"""


def build_evaluation_prompt(answer_text, skill_name, voice_metrics=None):
    voice_context = build_voice_context(voice_metrics)
    return f"""
You are a senior technical interviewer.

Evaluate the user's answer strictly for the skill: "{skill_name}".

Scoring rules:
- clarity: how clearly the idea is explained (0-10)
- correctness: factual and conceptual accuracy (0-10)
- depth: level of insight and completeness (0-10)
- delivery: quality of verbal presentation including pace, confidence, and minimal filler words (0-10)
{voice_context}
Also:
- Identify important missing concepts (if any)
- Give a natural interviewer reaction
- Provide a summary feedback about the user's explanation
- Provide specific improvement suggestions for the user
- If voice metrics are provided, give specific feedback about their delivery (pace, filler words, pauses)

Return ONLY valid JSON in this exact format:

{json.dumps(SCORING_SCHEMA, indent=2)}

User answer:
\"\"\"
{answer_text}
\"\"\"
"""
