# saucevm

`saucevm` provides the building blocks of an interpreter for the
stack-based bytecode in compiled class files of a script-driven game
engine. These are typed values, the operand stack, object and thread
pools, loaded class data, and handlers for the arithmetic and variable
opcodes.

## Installation

```
pip install saucevm
```

To run the tests, install the `test` extra and run `pytest`:

```
pip install "saucevm[test]"
pytest
```

## Modules

- `saucevm.types` holds the shared definitions:
  - `VMError` is raised for every runtime fault.
  - `VarType` lists the type codes (`INT32`, `FLOAT`, `OBJECT`, `CHAR`,
    `ANY`, ...). `ScriptState` lists the script states.
  - `Var` is a typed 32-bit value.
  - `var_type_name` gives readable names such as `CHAR[]`.
  - `check_var_type` and `convert_var` check types and convert values
    between them.
  - `element_type` gives the type of an array variable's elements.
  - `to_int32`, `float_to_bits`, `bits_to_float`, `read_u32` and
    `write_u32` are 32-bit and little-endian helpers.
- `saucevm.stack` has `Stack`, a bounded operand stack.
  - `push`, `pop_var` and `top` work on single values.
  - `pop(expected_type)` checks the type of any non-zero value it pops.
  - `push_float` and `pop_float` store floats as their single-precision
    bit patterns.
  - Underflow and overflow raise `VMError`.
- `saucevm.objects` has `VMObject`, whose members are numbered from 1,
  and `ObjectPool`.
  - `ObjectPool.new` creates an object and copies in the default members
    given to it.
  - `ObjectPool.get` looks an object up by handle.
  - `ObjectPool.release` frees an object's slot.
- `saucevm.threads` has `VMThread`, with `start` and goto labels set by
  `define`, and `ThreadList`.
  - `ThreadList.new`, `add`, `remove` and `release` manage the threads.
    `add` puts a thread at the head of the list.
  - `go_to` sends threads to a label.
  - `find_id`, `count` and `is_alive` answer queries about the list.
- `saucevm.program` holds loaded class data:
  - `RefType`, `RefEntry` and `CodeEntry` describe a class's contents.
  - `ClassData` has tables indexed from 1, read through `string`, `ref`,
    `code` and `static_var`. It has case-insensitive lookups through
    `find_method`, `find_member` and `find_static`.
  - `ClassTable` gives out class handles with `add`. It looks classes up
    with `get`, `name` and `find`.
- `saucevm.ops_arith` handles integer and float arithmetic, comparisons,
  logic, random numbers and stack shuffling (pop, dup, swap).
- `saucevm.ops_vars` handles pushing constants and moving values between
  the stack and local, member and static variables.

Each opcode module has a `register(table)` function. It puts that
module's handlers into `table` under their opcode numbers. A handler is
called with a single machine argument.

## Handles

Runtime entities are referred to by integer handles. Each kind has its
own base, defined in `saucevm.types`:

| Entity  | Base handle |
|---------|-------------|
| class   | 2000000     |
| object  | 3000000     |
| array   | 4000000     |
| thread  | 5000000     |

## Example

The arithmetic handlers need an object with a `stack` attribute and an
`rng` attribute that has `randint(a, b)`:

```python
import random
from types import SimpleNamespace

from saucevm import ops_arith
from saucevm.stack import Stack
from saucevm.types import VarType

table = {}
ops_arith.register(table)

m = SimpleNamespace(stack=Stack(), rng=random.Random(0))
m.stack.push(7, VarType.INT32)
m.stack.push(2, VarType.INT32)
table[0x1B](m)                    # integer division, truncating
print(m.stack.pop(VarType.INT32))  # 3
```

The variable handlers in `saucevm.ops_vars` need more from that object:

- `stack` and `script`. The script carries `code_data`, `code_offset`,
  `obj`, `class_data` and `local_vars`.
- `objects`, an `ObjectPool`.
- `classes`, a `ClassTable`.
- `local_var(num)`, `member_var(obj, num)` and `static_var(data, num)`
  lookups.

## What the package does not do

There is no machine in this package. Nothing loads class files, runs a
dispatch loop, calls methods or schedules threads frame by frame. The
caller supplies the object that opcode handlers work on, along with the
variable lookups listed above.

The package also has no array or string values and no opcodes for them.
It has no opcodes for jumps, calls, object creation, thread control or
syscalls. Only the opcodes registered by `ops_arith` and `ops_vars` are
available.