"""Sample notes offered by the dashboard as one-click inputs."""

SAMPLE_NOTES = (
    "Patient John Doe, a 45-year-old male, presented with hi blood presure and complained of severe headaches. "
    "He has a history of diabetis and is currently taking metformin. "
    "The patient reported experiencing dizziness and blurred vision.",
    "Sarah Smith, female, age 32, visited the clinic with symptoms of feaver, caugh, and fatigue. "
    "She was diagnosed with a respiratory infection and prescribed antibiotics. "
    "The patient has no known allergies.",
    "Mr. Robert Johnson, 58 years old, came in for a follow-up after his recent hart attack. "
    "He's been taking aspirin and beta-blockers as prescribed. "
    "The patient reported feeling much better but still experiences some shortness of breath during physical activity.",
)
