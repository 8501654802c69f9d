"""Handler modules for CRD resources.

Handlers register themselves via @kopf decorators when imported by ``main``.
"""
