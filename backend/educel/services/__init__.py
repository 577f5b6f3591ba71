"""Domain services: generation pipeline, lifecycle, engagement and prefs."""
