# kitutil

A collection of small, dependency-free utilities for systems code.

## Modules

- `kitutil.base_encode`: base16, base32, base32hex, base64 and base64url
  encoding and decoding. The `*encode` functions take bytes and return text.
  The `*decode` functions return a tuple `(data, consumed)`, where `consumed`
  is the number of input characters used. Decoding stops quietly at the first
  character that is not part of the encoding. `skip_whitespace=True` makes it
  skip tabs, newlines and spaces instead. Padded base64 raises
  `BaseEncodingError` when padding is missing. `bin2hex(data, upper=False)`
  and `hex2bin(text)` are simple hex helpers; `hex2bin` returns only the bytes.
- `kitutil.paths`: `basename(path)` returns everything after the last `/`.
- `kitutil.bits`: bit masks in network order, where bit 0 is `0x80` of the
  first byte (so `/25` is `ff ff ff 80`). It provides `bits_set`,
  `bits_clear` and `bits_isset`, which work on single bits in place, and
  `bits_copy`, `bits_equal` and `bits_isset_any`, which work on the first
  `num_bits` bits.
- `kitutil.counters`: `Counters` is a registry of named counters. Each thread
  has its own storage: static slots through `init_thread`/`fini_thread`,
  dynamic slots through `prepare_dynamic_threads`, `init_dynamic_thread` and
  `fini_dynamic_thread`, and an optional shared area for threads without a
  slot. `get`, `get_data` and `combine` read the totals. `new` accepts an
  optional combine handler and MIB function. `mib_text(subtree, callback)`
  calls `callback(name, value)` for each counter under a dotted subtree, in
  name order. `mib_in_tree(tree, mib)` tests whether a dotted name lies
  within a subtree. Misuse raises `CounterError`.
- `kitutil.ids`: the `Guid` (16 bytes) and `DeviceId` (8 bytes) identifiers.
  `str()` gives lower-case hex. `guid_from_str` and `deviceid_from_str`
  parse hex text and give the nil identifier for text of the wrong length.
  `guid_cmp` and `deviceid_cmp` order identifiers, with `None` first.
  `md5_to_str` formats a 16-byte digest.
- `kitutil.hostname`: `hostname()` and `short_hostname()`. The host name is
  looked up again at most once a minute per thread, and `short_hostname()`
  cuts the name before its second dot.
- `kitutil.random`: `random32()`, `random16()` and `random8()` return
  cryptographically strong random unsigned integers.
- `kitutil.infolog`: `InfoLog(stream=None, clock=None)` writes lines prefixed
  with the native thread id, to standard error by default. Lines are cut to
  1024 characters, ending in `...`. A line identical to the one before is
  written at most 11 times within one second. `log(flag, ...)` writes only
  when `flag` is set in the `flags` attribute.
- `kitutil.graphitelog`: `GraphiteLog(counters)` writes counter values as JSON
  lines that hold a `log.timestamp` and at most `json_limit` counters each.
  Call `set_options(json_limit, interval)` first. `emit(stream)` writes once,
  and `run(stream, counter_slot)` writes repeatedly until `terminate()` is
  called.

## Example

```python
from kitutil.base_encode import base64encode, base64decode
from kitutil.counters import Counters

encoded = base64encode(b"hello")          # "aGVsbG8="
data, consumed = base64decode(encoded)
assert data == b"hello" and consumed == len(encoded)

counters = Counters()
requests = counters.new("app.requests")
counters.initialize(600, 2, True)
counters.incr(requests)
print(counters.get(requests))             # 1
```

## What it does not do

`GraphiteLog` only writes text to a stream you provide. It does not connect to
or send data to a graphite server. The package has no command-line program.

## Running the tests

```
pip install -e .[test]
pytest
```