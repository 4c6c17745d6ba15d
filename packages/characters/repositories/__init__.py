from packages.characters.repositories.character_repository import CharacterRepository

__all__ = ["CharacterRepository"]
