"""Account mailer adapters."""
