SCORING_SCHEMA = {
    "clarity": "number 0-10",
    "correctness": "number 0-10",
    "depth": "number 0-10",
    "delivery": "number 0-10",
    "missingConcepts": ["list of strings"],
    "reaction": "impressed | neutral | confused | skeptical",
    "feedback": "string",
    "improvementSuggestions": ["list of strings"],
    "deliveryFeedback": "string describing voice delivery quality, filler word usage, and pacing",
}

SCORE_FIELDS = ("clarity", "correctness", "depth", "delivery")
REACTIONS = ("impressed", "neutral", "confused", "skeptical")
DEFAULT_REACTION = "neutral"
MAX_SCORE = 10

DEFAULT_FEEDBACK = "Good effort! Continue practicing to sharpen your expertise."
DEFAULT_DELIVERY_FEEDBACK = "No voice metrics available for delivery analysis."

FAILED_CONCEPT = "Evaluation failed"
FAILED_FEEDBACK = "We couldn't generate a detailed evaluation at this time. Please try again."
FAILED_SUGGESTIONS = ["Check your connection and retry the evaluation."]
FAILED_DELIVERY_FEEDBACK = "Evaluation failed - unable to analyze delivery."
