"""Role tiers, capability catalog, rule table, resolver, and enforcement gate."""
