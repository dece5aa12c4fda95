"""authview -- drive an embedded browser through a third-party login.

This package watches the navigation events of a hosted web view (or any other
browser surrogate) while the user signs in at an identity provider, detects
the redirect to a known callback URI, and delivers exactly one well-defined
outcome to the code that started the login.

Typical usage::

    from authview.flow import run_login
    from authview.surfaces import HttpSurface

    async with HttpSurface() as surface:
        outcome = await run_login(surface, start_uri, end_uri)

Modules:
    classifier: Pure classification of navigation URIs.
    broker: Single-flight session holder and completion notifier.
    controller: Login state machine driving a navigation surface.
    debounce: Deferred progress-indicator hiding.
    cancellation: User-cancel handling.
    screen: Host lifecycle binding.
    flow: End-to-end runners (live login and transcript replay).
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and precedence resolution.
    app: Typer application and CLI entry point.
"""

__version__ = "0.1.0"
