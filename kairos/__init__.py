"""
Kairos - the temporal decision engine for a live-coding music environment.

A live-coded program is re-run from the top every time the clock ticks, and
again every time its author commits an edit. Kairos answers the two questions
such a program keeps asking:

- **Does this fire now?** Clock predicates (``beat()``, ``bar()``,
  ``onbeat()``, ``oneuclid()`` ...) turn the current pulse into a yes/no
  decision. They are pure functions of one clock snapshot, so every line of
  the program agrees on the time.
- **What was I doing last time?** Counters, variables, seeded generators, a
  drunk walk, cached lazy sequences and pattern players are keyed by an
  identity the program supplies. Re-running the program finds the same state
  under the same key, so sequences advance exactly once per run instead of
  restarting.

What makes it robust during a performance:

- **Edits land on cycle boundaries.** A pattern player whose text is edited
  keeps playing to the end of its cycle before the new text takes over.
- **Broken input is contained.** A pattern that fails to parse is reported
  once and skipped until its text changes. A program that raises is logged
  once per distinct error. Nothing stops the clock.
- **Bounded memory.** Cached expressions are evicted least-recently-used
  past a capacity and expire after an idle period.

Minimal example:

    ```python
    import asyncio

    import kairos

    session = kairos.Session()
    session.load('''
    if onbeat(1, 3):
        print("kick", counter("kicks", limit=7))
    if oneuclid(3, 8):
        print("hat", player("0 3 [5 7]"))
    ''')

    transport = kairos.Transport(session, bpm=120)
    asyncio.run(transport.render(bars=4))
    ```

Package-level exports: ``Session``, ``Clock``, ``ClockPosition``,
``Transport``, ``generate_key``.
"""

import kairos.clock
import kairos.expression_cache
import kairos.session
import kairos.transport


Clock = kairos.clock.Clock
ClockPosition = kairos.clock.ClockPosition
Session = kairos.session.Session
Transport = kairos.transport.Transport
generate_key = kairos.expression_cache.generate_key
