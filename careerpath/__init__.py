"""Career guidance core: assessment profiles, AI-enhanced career matches, and real job search."""
