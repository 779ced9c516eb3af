"""Company outreach pipeline: research, verify and compose personalized outreach."""
