from packages.characters.models.database.character import CharacterEntity

__all__ = ["CharacterEntity"]
