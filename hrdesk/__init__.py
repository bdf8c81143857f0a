"""HR Desk — employee directory, leave, attendance and profiles."""
