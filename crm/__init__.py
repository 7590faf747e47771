"""Small-business CRM — contractors, tasks, offers, emails, support."""
