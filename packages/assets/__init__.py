"""Assets package - hands avatar and cover renders to the image backend."""
