"""bridge

Core package for the Bridge CLI integration.

Why this exists
---------------
The CI entrypoints (GitHub Action, Azure DevOps task, local shell) all need to
agree on the same two decisions:

* whether/from where/which version of the Bridge CLI to install
  (:mod:`bridge.resolver`)
* how the Bridge CLI's exit code maps onto a build status
  (:mod:`bridge.exit_policy`)

Both are pure functions over small immutable request/config objects
(:mod:`bridge.models`). Everything that touches the network, the filesystem or
a subprocess lives in :mod:`pipeline` and :mod:`tools`.
"""

from __future__ import annotations

__version__ = "2.2.0"
