# steamos-manager

Python building blocks for managing a SteamOS device: identifying the
hardware, handling PlayStation controller mouse emulation, running external
processes as controllable jobs, and keeping a daemon's state and layered
configuration in TOML files.

## Modules

### `steamos_manager.paths`

Every filesystem access in the package goes through `path()`. When a root
has been set with `set_root()`, an absolute path is resolved under that
root instead of `/`, so the package can run against a fake `/sys`, `/dev`
and `/proc` tree. `set_root(None)` goes back to real paths, and `get_root()`
returns the current root (or `None`). `write_synced(path, data)` writes
bytes or text to a file and calls `fsync` on it.

```python
from steamos_manager import paths

paths.set_root("/tmp/fake-root")
print(paths.path("/sys/class/dmi/id/board_name"))
# /tmp/fake-root/sys/class/dmi/id/board_name
```

### `steamos_manager.cec`

`HdmiCecState` is an `IntEnum` with `DISABLED` (0), `CONTROL_ONLY` (1) and
`CONTROL_AND_WAKE` (2). `HdmiCecState.from_str()` accepts, ignoring case,
`disable`/`disabled`/`off`, `control-only`/`controlonly` and
`control-wake`/`control-and-wake`/`controlandwake`; anything else raises
`ValueError`. `str()` gives `Disabled`, `ControlOnly` or `ControlAndWake`,
and `to_human_readable()` gives `disabled`, `control-only` or
`control-and-wake`.

```python
from steamos_manager.cec import HdmiCecState

state = HdmiCecState.from_str("control-and-wake")
print(state.to_human_readable())   # control-and-wake
HdmiCecState(1)                    # HdmiCecState.CONTROL_ONLY
HdmiCecState.from_str("working")   # raises ValueError
```

### `steamos_manager.hardware`

Device detection from `/sys/class/dmi/id/{sys_vendor,board_name,product_name}`
(trailing whitespace is ignored; a missing file raises `OSError`).

- `steam_deck_variant()` returns `SteamDeckVariant.JUPITER` or `GALILEO`
  when the vendor is `Valve` and the board name matches, otherwise
  `SteamDeckVariant.UNKNOWN`.
- `device_variant()` returns a `(DeviceType, model)` pair: ROG Ally
  (board `RC71L`), ROG Ally X (`RC72LA`), Legion Go (product `83E1`),
  Legion Go S (products `83L3`, `83N6`, `83Q2`, `83Q3`), Steam Deck (Valve
  boards `Jupiter`, `Galileo`) and Zotac Gaming Zone (`G0A1W`); anything
  else gives `(DeviceType.UNKNOWN, "unknown")`.
- `device_type()` returns just the `DeviceType`.

`FanControlState` (`BIOS` = 0, `OS` = 1) and `FactoryResetKind`
(`USER` = 1, `OS` = 2, `ALL` = 3) are `IntEnum`s. Each of these enums, like
`SteamDeckVariant` and `DeviceType` (whose string forms are snake_case,
such as `steam_deck`), has a `from_str()` that ignores case and raises
`ValueError` for unknown names.

### `steamos_manager.ds_inhibit`

`HidNode(id)` stands for `/dev/hidraw<id>`:

- `sys_base()` and `hidraw()` return its sysfs device directory and device node.
- `get_nodes()` lists the `inhibited` file of every input that has a
  `mouse*` child.
- `can_inhibit()` is true when the driver is `sony` or `playstation` and
  there is at least one such input.
- `inhibit()` and `uninhibit()` write `1` or `0` to every node, trying all
  of them before raising the last `OSError`.
- `check()` scans `/proc/*/fd` and inhibits the node when a process named
  `steam` has it open, otherwise uninhibits it.

`Inhibitor.init()` starts a watchdog observer on `/dev` and adds every
inhibitable hidraw node already present. `watch(path)` adds a single node
and returns whether it was added. `run()` blocks and handles events:
new nodes are picked up after a 0.25 s delay, deleted nodes are dropped,
and any other event on a tracked node re-runs `check()`. `shutdown()` stops
the observer, makes `run()` return, and uninhibits every tracked node.

### `steamos_manager.job`

`Job.spawn(executable, args)` starts a process. `pause()` sends `SIGSTOP`,
`resume()` sends `SIGCONT`, `cancel(force)` sends `SIGTERM` (or `SIGKILL`
when `force` is true) unless the process has already finished and resumes
it if paused, and `wait()` returns the exit code, or minus the signal
number if the process was killed. `try_wait()` returns the exit code
without blocking, or `None`. Pausing twice, resuming when not paused, and
signalling a finished process raise `JobError`.

`JobManager` assigns jobs the paths
`/com/steampowered/SteamOSManager1/Jobs/0`, `/1`, and so on.
`run_process(executable, args, operation_name)` starts a job and returns
its path (raising `JobError` if the process cannot start), calling the
optional `on_job_started(path)` callback. `get_job(path)` returns the job
or raises `KeyError`.

```python
from steamos_manager.job import JobManager

manager = JobManager()
job_path = manager.run_process("/bin/false", [], "example")
print(job_path, manager.get_job(job_path).wait())
# /com/steampowered/SteamOSManager1/Jobs/0 1
```

### `steamos_manager.daemon_config`

Subclass `DaemonContext` and implement `user_config_path()`,
`system_config_path()` and `state()`; override `load_state(data)` and
`load_config(data)` to turn parsed TOML into your own objects (by default
they return a `dict`). `state_path()` defaults to `state.toml` in the user
configuration directory.

- `read_state(context)` loads the state file, or `load_state({})` when it
  does not exist.
- `write_state(context)` writes `context.state()` (a mapping or a
  dataclass) as TOML, creating the directory if needed.
- `read_config(context)` merges, in order, the system `config.toml`, the
  `*.toml` files in its `config.toml.d` directory (sorted by name), then the
  user `config.toml` and its `config.toml.d` fragments. Later files win and
  tables are merged key by key; missing files are skipped.

## What this package does not do

It has no D-Bus service, no daemon main loop and no command-line tool. It
does not switch HDMI-CEC or fan control on or off through systemd units or
scripts; it only provides the states and device information such a service
would use.

## Requirements

Python 3.11 or later on Linux. Controller inhibition needs read access to
`/proc` and write access to the input devices' `inhibited` nodes.