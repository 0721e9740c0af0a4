""" Avro schema fingerprints over the Parsing Canonical Form """

import base64
import hashlib
import json
import logging
import sys
from typing import Dict, Optional, Tuple

from fastavro.schema import parse_schema

from avropcf.pcf import transform_to_pcf

logger = logging.getLogger(__name__)

EMPTY = 0xc15d213aa4d7a795
RABIN_64 = 'CRC-64-AVRO'

# Java algorithm names as used by the Avro SchemaNormalization class
JAVA_FINGERPRINT_MAPPING: Dict[str, str] = {
    'SHA-256': 'sha256',
    'MD5': 'md5',
}

FINGERPRINT_ALGORITHMS = frozenset(
    [RABIN_64, *JAVA_FINGERPRINT_MAPPING,
     *(name for name in hashlib.algorithms_guaranteed if not name.startswith('shake_'))])


def _build_fp_table() -> Tuple[int, ...]:
    """
    Builds the lookup table for the 64-bit Rabin fingerprint.
    """
    table = []
    for i in range(256):
        fp = i
        for _ in range(8):
            fp = (fp >> 1) ^ (EMPTY & -(fp & 1))
        table.append(fp)
    return tuple(table)


FP_TABLE = _build_fp_table()


def fingerprint64(buf: bytes) -> int:
    """
    Computes a 64-bit Rabin fingerprint (CRC-64-AVRO).

    :param buf: The input byte buffer.
    :return: The 64-bit Rabin fingerprint.
    """
    fp = EMPTY
    for byte in buf:
        fp = (fp >> 8) ^ FP_TABLE[(fp ^ byte) & 0xff]
    return fp


def fingerprint(parsing_canonical_form: str, algorithm: str = RABIN_64) -> str:
    """
    Returns the hex fingerprint of a Parsing Canonical Form string.

    The Rabin fingerprint is rendered as its 8 little-endian bytes, the order
    used by Avro single-object encoding.

    :param parsing_canonical_form: The canonical form of a schema.
    :param algorithm: CRC-64-AVRO, SHA-256, MD5 or any hashlib algorithm name.
    :return: The fingerprint as a hex string.
    """
    if algorithm not in FINGERPRINT_ALGORITHMS:
        raise ValueError(
            f"Unknown schema fingerprint algorithm {algorithm}. "
            f"Valid values include: {sorted(FINGERPRINT_ALGORITHMS)}")
    data = parsing_canonical_form.encode('utf-8')
    if algorithm == RABIN_64:
        return fingerprint64(data).to_bytes(8, 'little').hex()
    return hashlib.new(JAVA_FINGERPRINT_MAPPING.get(algorithm, algorithm), data).hexdigest()


def fingerprint_sha256(schema_json: str) -> str:
    """
    Generates a SHA-256 fingerprint for the given Avro schema.

    :param schema_json: The Avro schema as a JSON string.
    :return: The SHA-256 fingerprint as a base64 string.
    """
    pcf = transform_to_pcf(schema_json)
    sha256_hash = hashlib.sha256(pcf.encode('utf-8')).digest()
    return base64.b64encode(sha256_hash).decode('utf-8')


def fingerprint_md5(schema_json: str) -> str:
    """
    Generates an MD5 fingerprint for the given Avro schema.

    :param schema_json: The Avro schema as a JSON string.
    :return: The MD5 fingerprint as a base64 string.
    """
    pcf = transform_to_pcf(schema_json)
    md5_hash = hashlib.md5(pcf.encode('utf-8')).digest()
    return base64.b64encode(md5_hash).decode('utf-8')


def fingerprint_rabin(schema_json: str) -> str:
    """
    Generates a 64-bit Rabin fingerprint for the given Avro schema.

    :param schema_json: The Avro schema as a JSON string.
    :return: The Rabin fingerprint (little-endian) as a base64 string.
    """
    pcf = transform_to_pcf(schema_json).encode('utf-8')
    fp = fingerprint64(pcf)
    return base64.b64encode(fp.to_bytes(8, 'little')).decode('utf-8')


class PCFSchemaResult:
    """Parsing Canonical Form of a schema together with its fingerprints."""

    def __init__(self, pcf: str, sha256: str, md5: str, rabin: str) -> None:
        self.pcf = pcf
        self.sha256 = sha256
        self.md5 = md5
        self.rabin = rabin

    def __repr__(self) -> str:
        return f"PCFSchemaResult(pcf={self.pcf!r}, rabin={self.rabin!r})"


def pcf_schema(schema_json: str) -> PCFSchemaResult:
    """
    Wrapper function to provide PCF transformation and fingerprinting.

    :param schema_json: The Avro schema as a JSON string.
    :return: A PCFSchemaResult with the PCF and its SHA-256, MD5 and Rabin fingerprints as base64 strings.
    """
    pcf = transform_to_pcf(schema_json)
    return PCFSchemaResult(pcf, fingerprint_sha256(schema_json), fingerprint_md5(schema_json), fingerprint_rabin(schema_json))


def _read_schema(avsc_file: str, validate: bool) -> str:
    logger.debug("Reading Avro schema from %s", avsc_file)
    with open(avsc_file, 'r', encoding='utf-8') as file:
        schema_json = file.read()
    if validate:
        parse_schema(json.loads(schema_json))
    return schema_json


def _write_output(text: str, out_file: Optional[str]) -> None:
    if out_file:
        logger.debug("Writing %s", out_file)
        with open(out_file, 'w', encoding='utf-8') as file:
            file.write(text)
    else:
        sys.stdout.write(text + '\n')


def avsc_to_pcf(avsc_file: str, pcf_file: Optional[str] = None, validate: bool = False) -> None:
    """ Convert an Avro schema file to its Parsing Canonical Form (PCF)."""
    schema_json = _read_schema(avsc_file, validate)
    _write_output(transform_to_pcf(schema_json), pcf_file)


def avsc_to_fingerprint(avsc_file: str, algorithm: str = RABIN_64, out_file: Optional[str] = None,
                        validate: bool = False) -> None:
    """ Write the fingerprint of an Avro schema file's Parsing Canonical Form."""
    schema_json = _read_schema(avsc_file, validate)
    _write_output(fingerprint(transform_to_pcf(schema_json), algorithm), out_file)
