"""Campus navigation API adapter package.

Architectural role:
- Defines the external interaction boundary for HTTP and CLI interfaces.
- Performs transport-level validation and response shaping.
- Delegates routing to `campusnav.navigation` and chat to
  `campusnav.conversation`.
"""
