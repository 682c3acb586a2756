"""Client workflows -- requests, stages, processes, onboarding actions and their automation."""
