"""Domain models for Meetflow: rules, meeting context, outcomes, config."""
