# ycsb

A YCSB-style benchmark client for key-value stores. It generates a load
phase and a transaction phase of operations with uniform, zipfian,
scrambled zipfian or "latest" key distributions. It runs them from several
threads against a database driver and reports operation counts,
throughput and latencies.

## Installation

```
pip install .
```

This installs the `lmdb` package, which the LMDB driver uses. To run the
tests, install the `test` extra (`pip install .[test]`) and run `pytest`.

## Drivers

Pick a driver with `-db name` or the `dbname` property. The default is `basic`.

- `basic` (`ycsb.basic_db.BasicDB`) stores nothing. It prints each
  operation it receives, for example `READ usertable user123 < all fields >`.
  Set `basic.silent=true` to suppress the output.
- `sqlite` (`ycsb.sqlite_db.SqliteDB`) keeps one row per record in an SQLite
  table with a TEXT primary key and one TEXT column per field. All clients
  share one connection. Its properties are:
  - `sqlite.dbpath` (required)
  - `sqlite.primary_key` (default `user_id`)
  - `sqlite.create_table` (default `true`)
  - `sqlite.cache_size` (default `-2000`)
  - `sqlite.page_size` (default `4096`)
  - `sqlite.journal_mode` (default `WAL`)
  - `sqlite.synchronous` (default `NORMAL`)
- `lmdb` (`ycsb.lmdb_db.LmdbDB`) stores each record as one value in an LMDB
  environment. The value is a sequence of name and value strings, each
  prefixed by a 32-bit little-endian length. Its properties are:
  - `lmdb.dbpath` (required; the directory is created if missing)
  - `lmdb.mapsize` (used when it is 0 or more)
  - the flags `lmdb.nosync`, `lmdb.nometasync`, `lmdb.noreadahead`,
    `lmdb.writemap` and `lmdb.mapasync`

You can add further drivers with `ycsb.db_factory.register_db(name, creator)`.
The creator takes no arguments and returns a `ycsb.db.DB`.

## Command line

```
ycsb -load -run -db sqlite -threads 4 -P workload.properties -p sqlite.dbpath=bench.db -s
```

Options:

- `-load`: run the loading phase of the workload
- `-t` / `-run`: run the transaction phase
- `-threads n`: number of client threads (default 1)
- `-db name`: database driver (default `basic`)
- `-P file`: load properties from a file. The option may be repeated.
- `-p name=value`: set one property
- `-s`: print a status line periodically (every `status.interval` seconds,
  default 10)

Options are applied in the order given, so a later `-p` or `-P` overrides
an earlier one. If you pass no options, or an option is unknown or lacks
its value, the command prints the usage text.

A property file holds `name=value` lines. Lines starting with `#` are
comments. For example:

```
recordcount=1000
operationcount=1000
readproportion=0.5
updateproportion=0.5
requestdistribution=zipfian
fieldcount=10
fieldlength=100
```

### Workload properties

| Property | Default | Meaning |
| --- | --- | --- |
| `recordcount` | required | records inserted in the load phase |
| `operationcount` | required for the run phase | operations in the run phase |
| `table` | `usertable` | table name passed to the driver |
| `fieldcount` | `10` | fields per record |
| `fieldnameprefix` | `field` | field names are prefix plus index |
| `fieldlength` | `100` | field value length |
| `field_len_dist` | `constant` | `constant`, `uniform` or `zipfian` |
| `readproportion` | `0.95` | share of reads |
| `updateproportion` | `0.05` | share of updates |
| `insertproportion` | `0.0` | share of inserts |
| `scanproportion` | `0.0` | share of scans |
| `readmodifywriteproportion` | `0.0` | share of read-modify-writes |
| `requestdistribution` | `uniform` | `uniform`, `zipfian` or `latest` |
| `zipfian_const` | 0.99 | zipfian constant for key choice |
| `minscanlength` / `maxscanlength` | `1` / `1000` | scan length bounds |
| `scanlengthdistribution` | `uniform` | `uniform` or `zipfian` |
| `insertorder` | `hashed` | `hashed` scatters keys; any other value keeps them ordered |
| `insertstart` | `0` | first key number of the load phase |
| `zeropadding` | `1` | minimum digits in a key number |
| `readallfields` | `true` | read every field, or one random field |
| `writeallfields` | `false` | update every field, or one random field |

### Run properties

- `threadcount`: the number of client threads (the same as `-threads`).
- `measurementtype`: `hdrhistogram` (the default) or `basic`. The
  histogram also reports the 90th, 99th, 99.9th and 99.99th percentiles.
  Latencies are shown in microseconds.
- `limit.ops`: an operations-per-second limit for the run phase, shared
  evenly among the threads.
- `limit.file`: a file of `seconds rate` pairs. At each time, measured in
  seconds from the start of the run phase, the rate changes.
- `sleepafterload`: seconds to wait between the two phases.

After each phase, the command prints the runtime, the number of
operations and the throughput.

## Library use

```python
from ycsb.properties import Properties
from ycsb.measurements import create_measurements
from ycsb.db_factory import create_db
from ycsb.core_workload import CoreWorkload

props = Properties()
props.set("recordcount", "100")
props.set("operationcount", "100")
props.set("basic.silent", "true")

measurements = create_measurements(props)
db = create_db(props, measurements)
db.init()
workload = CoreWorkload(props)
for _ in range(100):
    workload.do_insert(db)
print(measurements.status_message())
```

The key and value generators are in `ycsb.generators`. They include
`UniformGenerator`, `ZipfianGenerator`, `ScrambledZipfianGenerator`,
`SkewedLatestGenerator`, `CounterGenerator` and `DiscreteGenerator`.

## What is not included

The package offers only the `basic`, `sqlite` and `lmdb` drivers. It has
no drivers for other storage engines. Those engines can be used only
through a driver you register yourself. The workload never issues deletes,
although every driver implements `delete`.