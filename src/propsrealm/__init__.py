"""propsrealm — legacy properties-file identity realm and regex role mapper."""

__version__ = "0.3.0"
