from . import public, internal
