"""Characters package - persisted role-play characters."""
