# arcdps_ext

`arcdps_ext` provides building blocks for combat-log addons. It has no dependencies
outside the standard library.

- **`arcdps_ext.singleton`**: `Singleton` is a base class. Each direct subclass holds one
  shared instance. `instance()` creates it without arguments the first time it is called.
  `init(*args, **kwargs)` creates it from the arguments you pass. `f(action)` calls
  `action` with the instance, if one exists. `reset()` releases it. Every instance is
  registered with the module-level `singleton_manager`, a `SingletonManager`.
  `singleton_manager.shutdown()` releases all instances, newest first.
  `singleton_manager.empty()` reports whether any instance is still alive.
- **`arcdps_ext.event_sequencer`**: `EventSequencer(callback)` accepts events through
  `process_event(event, src, dst, skillname, id, revision)`. A worker thread delivers
  them to the callback in ascending id order, and ids start at 2. An event with id 0 is
  delivered at once when nothing is queued. Otherwise it is queued behind the last id
  seen. The other methods are `events_pending()`, `reset()` and `shutdown()`. The class
  can also be used as a context manager.
- **`arcdps_ext.combat_event_handler`**: `CombatEventHandler` sits on top of the
  sequencer. It decodes each `CombatEvent` and its `Agent` objects, using the
  `StateChange` values, and calls one overridable hook per kind of event. Examples are
  `enter_combat`, `exit_combat`, `buff_apply`, `buff_remove`, `strike`, `agent_added`,
  `agent_removed` and `target_change`. Diagnostic text goes to `log(text)`, which writes
  it to the standard `logging` module at debug level.
- **`arcdps_ext.localization`**: `Localization` is a singleton that keeps one table of
  texts per `Language`. Texts are appended with `add_translation` or `load`, so an id is
  a text's position in its table. `translate(id)` looks the id up in the current
  language, and `change_language(lang)` switches that language.
  `override_translation(language, id, text)` replaces an existing text. Unknown ids and
  languages raise `IndexError`.
- **`arcdps_ext.network_stack`**: `SimpleNetworkStack` is a singleton. Its worker thread
  runs queued HTTP GET requests one after another.

## Handling combat events

```python
from arcdps_ext.combat_event_handler import Agent, CombatEvent, CombatEventHandler, StateChange

class MyHandler(CombatEventHandler):
    def enter_combat(self, time, agent_id, subgroup, agent):
        print(f"{agent.name} entered combat in subgroup {subgroup}")

with MyHandler() as handler:
    ev = CombatEvent(time=100, src_agent=7, dst_agent=1, is_statechange=StateChange.ENTER_COMBAT)
    handler.event(ev, Agent(name="Some Character", id=7), None, None, 2)
    while handler.events_pending():
        pass
```

## Localization

```python
from arcdps_ext.localization import Language, Localization

loc = Localization.instance()
loc.load(Language.ENGLISH, ["Hello"])
loc.load(Language.GERMAN, ["Hallo"])
loc.change_language(Language.GERMAN)
print(loc.translate(0))  # "Hallo"
```

Give every language the same number of texts, so that each id means the same thing in
all of them.

## HTTP requests

```python
from concurrent.futures import Future
from arcdps_ext.network_stack import SimpleNetworkStack

stack = SimpleNetworkStack.instance()

future = Future()
stack.queue_get("https://example.com/", future)
response = future.result()            # Response(body=..., code=...)
print(response.code, response.message)

stack.queue_get("https://example.com/", lambda result: print(result), "out.html")
```

A request can report its outcome in two ways:

- **Callable:** it receives either a `Response` or a `NetworkError`.
- **`concurrent.futures.Future`:** the `Response` becomes its result, and a `NetworkError`
  is raised as its exception.

If you pass a `filepath`, the body is written to that file and `Response.body` is empty.
Redirects are followed, and every HTTP status counts as a response.

You can set the `user_agent` and `timeout` attributes to change those request settings.
`url_encode(text)` percent-encodes everything except the unreserved URL characters.
`shutdown()` stops the worker thread. Any requests that have not started are dropped, and
their futures are cancelled.

## What this package does not do

The package contains no checker for new releases and no updater that downloads and
installs newer versions. It contains no built-in translation texts: every table starts
out empty. It provides no drawing or user interface, and no command-line program.

## Running the tests

```
pip install .[test]
pytest
```