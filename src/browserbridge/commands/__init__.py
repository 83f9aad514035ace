"""Built-in CLI sub-commands for browserbridge.

Modules:
    call: ``call``, ``open``, ``in-app``, ``auth`` and ``deeplink`` --
        client commands talking to a running host bridge.
    serve: ``serve`` -- run the host bridge server.
    config: ``config`` -- view and modify the persisted settings.
"""
