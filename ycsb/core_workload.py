"""The core workload: builds keys and records and issues the operation mix."""

from __future__ import annotations

from ycsb.db import DB, Field, Status
from ycsb.generators import (
    AcknowledgedCounterGenerator,
    ConstGenerator,
    CounterGenerator,
    DiscreteGenerator,
    Generator,
    RandomByteGenerator,
    ScrambledZipfianGenerator,
    SkewedLatestGenerator,
    UniformGenerator,
    ZipfianGenerator,
)
from ycsb.measurements import Operation
from ycsb.properties import Properties
from ycsb.utils import YcsbError, hash_value, str_to_bool, trim

__all__ = ["CoreWorkload"]

TABLENAME_PROPERTY = "table"
TABLENAME_DEFAULT = "usertable"

FIELD_COUNT_PROPERTY = "fieldcount"
FIELD_COUNT_DEFAULT = "10"

FIELD_LENGTH_DISTRIBUTION_PROPERTY = "field_len_dist"
FIELD_LENGTH_DISTRIBUTION_DEFAULT = "constant"

FIELD_LENGTH_PROPERTY = "fieldlength"
FIELD_LENGTH_DEFAULT = "100"

READ_ALL_FIELDS_PROPERTY = "readallfields"
READ_ALL_FIELDS_DEFAULT = "true"

WRITE_ALL_FIELDS_PROPERTY = "writeallfields"
WRITE_ALL_FIELDS_DEFAULT = "false"

READ_PROPORTION_PROPERTY = "readproportion"
READ_PROPORTION_DEFAULT = "0.95"

UPDATE_PROPORTION_PROPERTY = "updateproportion"
UPDATE_PROPORTION_DEFAULT = "0.05"

INSERT_PROPORTION_PROPERTY = "insertproportion"
INSERT_PROPORTION_DEFAULT = "0.0"

SCAN_PROPORTION_PROPERTY = "scanproportion"
SCAN_PROPORTION_DEFAULT = "0.0"

READMODIFYWRITE_PROPORTION_PROPERTY = "readmodifywriteproportion"
READMODIFYWRITE_PROPORTION_DEFAULT = "0.0"

REQUEST_DISTRIBUTION_PROPERTY = "requestdistribution"
REQUEST_DISTRIBUTION_DEFAULT = "uniform"

ZERO_PADDING_PROPERTY = "zeropadding"
ZERO_PADDING_DEFAULT = "1"

MIN_SCAN_LENGTH_PROPERTY = "minscanlength"
MIN_SCAN_LENGTH_DEFAULT = "1"

MAX_SCAN_LENGTH_PROPERTY = "maxscanlength"
MAX_SCAN_LENGTH_DEFAULT = "1000"

SCAN_LENGTH_DISTRIBUTION_PROPERTY = "scanlengthdistribution"
SCAN_LENGTH_DISTRIBUTION_DEFAULT = "uniform"

INSERT_ORDER_PROPERTY = "insertorder"
INSERT_ORDER_DEFAULT = "hashed"

INSERT_START_PROPERTY = "insertstart"
INSERT_START_DEFAULT = "0"

RECORD_COUNT_PROPERTY = "recordcount"
OPERATION_COUNT_PROPERTY = "operationcount"

FIELD_NAME_PREFIX = "fieldnameprefix"
FIELD_NAME_PREFIX_DEFAULT = "field"

ZIPFIAN_CONST_PROPERTY = "zipfian_const"


def _int_prop(props: Properties, name: str, default: str = "") -> int:
    text = props.get(name, default)
    try:
        return int(trim(text))
    except ValueError:
        raise YcsbError(f"Invalid integer for {name}: {text!r}") from None


def _float_prop(props: Properties, name: str, default: str = "") -> float:
    text = props.get(name, default)
    try:
        return float(trim(text))
    except ValueError:
        raise YcsbError(f"Invalid number for {name}: {text!r}") from None


def _field_len_generator(props: Properties) -> Generator[int]:
    dist = props.get(FIELD_LENGTH_DISTRIBUTION_PROPERTY, FIELD_LENGTH_DISTRIBUTION_DEFAULT)
    field_len = _int_prop(props, FIELD_LENGTH_PROPERTY, FIELD_LENGTH_DEFAULT)
    if dist == "constant":
        return ConstGenerator(field_len)
    if dist == "uniform":
        return UniformGenerator(1, field_len)
    if dist == "zipfian":
        return ZipfianGenerator(1, field_len)
    raise YcsbError("Unknown field length distribution: " + dist)


def _random_text(length: int) -> str:
    chars = RandomByteGenerator()
    return "".join(chars.next() for _ in range(length))


class CoreWorkload:
    """Workload configured from properties; shared by every client thread."""

    def __init__(self, props: Properties) -> None:
        self.table_name = props.get(TABLENAME_PROPERTY, TABLENAME_DEFAULT)
        self.field_count = _int_prop(props, FIELD_COUNT_PROPERTY, FIELD_COUNT_DEFAULT)
        self.field_prefix = props.get(FIELD_NAME_PREFIX, FIELD_NAME_PREFIX_DEFAULT)
        self._field_len_generator = _field_len_generator(props)

        read_proportion = _float_prop(props, READ_PROPORTION_PROPERTY, READ_PROPORTION_DEFAULT)
        update_proportion = _float_prop(
            props, UPDATE_PROPORTION_PROPERTY, UPDATE_PROPORTION_DEFAULT
        )
        insert_proportion = _float_prop(
            props, INSERT_PROPORTION_PROPERTY, INSERT_PROPORTION_DEFAULT
        )
        scan_proportion = _float_prop(props, SCAN_PROPORTION_PROPERTY, SCAN_PROPORTION_DEFAULT)
        rmw_proportion = _float_prop(
            props, READMODIFYWRITE_PROPORTION_PROPERTY, READMODIFYWRITE_PROPORTION_DEFAULT
        )

        self.record_count = _int_prop(props, RECORD_COUNT_PROPERTY)
        request_dist = props.get(REQUEST_DISTRIBUTION_PROPERTY, REQUEST_DISTRIBUTION_DEFAULT)
        min_scan_len = _int_prop(props, MIN_SCAN_LENGTH_PROPERTY, MIN_SCAN_LENGTH_DEFAULT)
        max_scan_len = _int_prop(props, MAX_SCAN_LENGTH_PROPERTY, MAX_SCAN_LENGTH_DEFAULT)
        scan_len_dist = props.get(
            SCAN_LENGTH_DISTRIBUTION_PROPERTY, SCAN_LENGTH_DISTRIBUTION_DEFAULT
        )
        insert_start = _int_prop(props, INSERT_START_PROPERTY, INSERT_START_DEFAULT)

        self.zero_padding = _int_prop(props, ZERO_PADDING_PROPERTY, ZERO_PADDING_DEFAULT)
        self.read_all_fields = str_to_bool(
            props.get(READ_ALL_FIELDS_PROPERTY, READ_ALL_FIELDS_DEFAULT)
        )
        self.write_all_fields = str_to_bool(
            props.get(WRITE_ALL_FIELDS_PROPERTY, WRITE_ALL_FIELDS_DEFAULT)
        )
        self.ordered_inserts = props.get(INSERT_ORDER_PROPERTY, INSERT_ORDER_DEFAULT) != "hashed"

        self._op_chooser: DiscreteGenerator[Operation] = DiscreteGenerator()
        for op, proportion in (
            (Operation.READ, read_proportion),
            (Operation.UPDATE, update_proportion),
            (Operation.INSERT, insert_proportion),
            (Operation.SCAN, scan_proportion),
            (Operation.READMODIFYWRITE, rmw_proportion),
        ):
            if proportion > 0:
                self._op_chooser.add_value(op, proportion)

        self._insert_key_sequence = CounterGenerator(insert_start)
        self._transaction_insert_key_sequence = AcknowledgedCounterGenerator(self.record_count)

        self._key_chooser: Generator[int]
        if request_dist == "uniform":
            self._key_chooser = UniformGenerator(0, self.record_count - 1)
        elif request_dist == "zipfian":
            # Leave room for keys inserted during the run so popular keys stay popular.
            op_count = _int_prop(props, OPERATION_COUNT_PROPERTY)
            new_keys = int(op_count * insert_proportion * 2)
            if ZIPFIAN_CONST_PROPERTY in props:
                zipfian_const = _float_prop(props, ZIPFIAN_CONST_PROPERTY)
                self._key_chooser = ScrambledZipfianGenerator(
                    0, self.record_count + new_keys - 1, zipfian_const
                )
            else:
                self._key_chooser = ScrambledZipfianGenerator(self.record_count + new_keys)
        elif request_dist == "latest":
            self._key_chooser = SkewedLatestGenerator(self._transaction_insert_key_sequence)
        else:
            raise YcsbError("Unknown request distribution: " + request_dist)

        self._field_chooser = UniformGenerator(0, self.field_count - 1)

        self._scan_len_chooser: Generator[int]
        if scan_len_dist == "uniform":
            self._scan_len_chooser = UniformGenerator(min_scan_len, max_scan_len)
        elif scan_len_dist == "zipfian":
            self._scan_len_chooser = ZipfianGenerator(min_scan_len, max_scan_len)
        else:
            raise YcsbError("Distribution not allowed for scan length: " + scan_len_dist)

    def build_key_name(self, key_num: int) -> str:
        """Return the record key for ``key_num``, hashed unless inserts are ordered."""
        if not self.ordered_inserts:
            key_num = hash_value(key_num)
        return "user" + str(key_num).rjust(self.zero_padding, "0")

    def build_values(self) -> list[Field]:
        """Return a full record with random values for every field."""
        return [
            Field(f"{self.field_prefix}{i}", _random_text(self._field_len_generator.next()))
            for i in range(self.field_count)
        ]

    def build_single_value(self) -> list[Field]:
        """Return one randomly chosen field with a random value."""
        name = self.next_field_name()
        return [Field(name, _random_text(self._field_len_generator.next()))]

    def next_transaction_key_num(self) -> int:
        """Choose a key number among the records inserted so far."""
        while True:
            key_num = self._key_chooser.next()
            if key_num <= self._transaction_insert_key_sequence.last():
                return key_num

    def next_field_name(self) -> str:
        """Choose a field name at random."""
        return f"{self.field_prefix}{self._field_chooser.next()}"

    def do_insert(self, db: DB) -> bool:
        """Insert the next record of the load phase; True on success."""
        key = self.build_key_name(self._insert_key_sequence.next())
        return db.insert(self.table_name, key, self.build_values()) == Status.OK

    def do_transaction(self, db: DB) -> bool:
        """Run one operation chosen from the configured mix; True on success."""
        op = self._op_chooser.next()
        if op == Operation.READ:
            status = self._transaction_read(db)
        elif op == Operation.UPDATE:
            status = self._transaction_update(db)
        elif op == Operation.INSERT:
            status = self._transaction_insert(db)
        elif op == Operation.SCAN:
            status = self._transaction_scan(db)
        elif op == Operation.READMODIFYWRITE:
            status = self._transaction_read_modify_write(db)
        else:
            raise YcsbError("Operation request is not recognized!")
        return status == Status.OK

    def _read_fields(self) -> list[str] | None:
        return None if self.read_all_fields else [self.next_field_name()]

    def _write_values(self) -> list[Field]:
        return self.build_values() if self.write_all_fields else self.build_single_value()

    def _transaction_read(self, db: DB) -> Status:
        key = self.build_key_name(self.next_transaction_key_num())
        status, _ = db.read(self.table_name, key, self._read_fields())
        return status

    def _transaction_read_modify_write(self, db: DB) -> Status:
        key = self.build_key_name(self.next_transaction_key_num())
        db.read(self.table_name, key, self._read_fields())
        return db.update(self.table_name, key, self._write_values())

    def _transaction_scan(self, db: DB) -> Status:
        key = self.build_key_name(self.next_transaction_key_num())
        length = self._scan_len_chooser.next()
        status, _ = db.scan(self.table_name, key, length, self._read_fields())
        return status

    def _transaction_update(self, db: DB) -> Status:
        key = self.build_key_name(self.next_transaction_key_num())
        return db.update(self.table_name, key, self._write_values())

    def _transaction_insert(self, db: DB) -> Status:
        key_num = self._transaction_insert_key_sequence.next()
        key = self.build_key_name(key_num)
        status = db.insert(self.table_name, key, self.build_values())
        self._transaction_insert_key_sequence.acknowledge(key_num)
        return status