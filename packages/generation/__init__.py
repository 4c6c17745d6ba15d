"""Character and story generation sessions."""
