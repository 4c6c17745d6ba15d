"""Stories package - persisted interactive stories."""
