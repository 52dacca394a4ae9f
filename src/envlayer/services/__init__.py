"""Service layer: operations returning ServiceResult.

Services may import from the config layer.
They must never import from commands or output.
"""
