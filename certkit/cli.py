#
# certkit: poke at X.509 certificates, CSRs and keys
#
# Usage: certkit [-opts] {genkey,matchkey,ski,sct,csrpub,serial} ...
#

import argparse
import json
import logging
import sys
from typing import List, Optional

from . import pemload
from .config import Settings, configure_logging
from .errors import CertkitError
from .hexenc import format_serial, parse_display_mode
from .keygen import generate
from .keymatch import match_keys
from .sct import extract_scts
from .ski import load_key_info

logger = logging.getLogger("certkit")


#
# one function per subcommand; each returns the exit status
#

def cmd_genkey(args: argparse.Namespace, settings: Settings) -> int:
    key_pair = generate(settings.algorithm())

    if args.output:
        with open(f"{args.output}.key", "wb") as f:
            f.write(key_pair.private_pem())
        with open(f"{args.output}.pub", "wb") as f:
            f.write(key_pair.public_pem())
        print(f"[+] wrote {args.output}.key and {args.output}.pub")
    else:
        sys.stdout.write(key_pair.private_pem().decode("ascii"))
        sys.stdout.write(key_pair.public_pem().decode("ascii"))

    return 0


def cmd_matchkey(args: argparse.Namespace, settings: Settings) -> int:
    cert = pemload.load_certificate(args.cert)
    priv = pemload.load_private_key(args.key)

    matched, reason = match_keys(cert, priv)
    if matched:
        print("Match.")
        return 0

    print(f"No match ({reason}).")
    return 1


def cmd_ski(args: argparse.Namespace, settings: Settings) -> int:
    first_ski = None
    status = 0

    for path in args.files:
        info = load_key_info(path)
        ski = info.ski(settings.display_mode)

        if first_ski is None:
            first_ski = ski
        if args.match and ski != first_ski:
            logger.warning(f"{path}: SKI mismatch ({first_ski} != {ski})")
            status = 1

        print(f"{path}  {ski} ({info.key_type} {info.file_type})")

    return status


def cmd_sct(args: argparse.Namespace, settings: Settings) -> int:
    result = {}
    for path in args.files:
        scts = []
        for cert in pemload.load_certificates(path):
            scts.extend(sct.to_dict(settings.display_mode) for sct in extract_scts(cert))
        logger.info(f"{path}: {len(scts)} SCT(s)")
        result[path] = scts

    print(json.dumps(result, indent=2, default=str))
    return 0


def cmd_csrpub(args: argparse.Namespace, settings: Settings) -> int:
    for path in args.files:
        csr = pemload.load_csr(path)
        with open(f"{path}.pub", "wb") as f:
            f.write(pemload.csr_public_pem(csr))
        print(f"[+] wrote {path}.pub.")

    return 0


def cmd_serial(args: argparse.Namespace, settings: Settings) -> int:
    mode = parse_display_mode(args.display_as)
    for path in args.files:
        cert = pemload.load_certificate(path)
        print(f"{path}: {format_serial(cert.serial_number, mode)}")

    return 0


#
# what goes on in CLI-land?
#
def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns: Parsed arguments

    """

    parser = argparse.ArgumentParser(
        description="Inspect X.509 certificates, CSRs and keys"
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug output"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output"
    )
    parser.add_argument(
        "-D",
        "--display",
        default="colon-lower",
        help="Display mode for digests and key material: lower, upper, colon-lower, colon-upper (default: colon-lower)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    genkey = subparsers.add_parser("genkey", help="Generate a key pair")
    genkey.add_argument(
        "-a",
        "--algorithm",
        choices=["rsa", "ecdsa", "ed25519"],
        default="ecdsa",
        help="Key algorithm (default: ecdsa)"
    )
    genkey.add_argument(
        "-b",
        "--bits",
        type=int,
        help="RSA modulus size or ECDSA curve size (256, 384, 521)"
    )
    genkey.add_argument(
        "-o",
        "--output",
        metavar="PREFIX",
        help="Write PREFIX.key and PREFIX.pub instead of printing"
    )
    genkey.set_defaults(func=cmd_genkey)

    matchkey = subparsers.add_parser("matchkey", help="Check that a private key belongs to a certificate")
    matchkey.add_argument("-c", "--cert", required=True, help="TLS certificate file")
    matchkey.add_argument("-k", "--key", required=True, help="TLS private key file")
    matchkey.set_defaults(func=cmd_matchkey)

    ski = subparsers.add_parser("ski", help="Print subject key identifiers for PEM files")
    ski.add_argument(
        "-m",
        "--match",
        action="store_true",
        help="All SKIs should match; report any mismatch"
    )
    ski.add_argument("files", metavar="FILES", nargs="+", help="PEM keys, certificates or CSRs")
    ski.set_defaults(func=cmd_ski)

    sct = subparsers.add_parser("sct", help="Dump embedded signed certificate timestamps")
    sct.add_argument("files", metavar="FILES", nargs="+", help="Certificate files")
    sct.set_defaults(func=cmd_sct)

    csrpub = subparsers.add_parser("csrpub", help="Write the public key of each CSR to FILE.pub")
    csrpub.add_argument("files", metavar="FILES", nargs="+", help="CSR files")
    csrpub.set_defaults(func=cmd_csrpub)

    serial = subparsers.add_parser("serial", help="Print certificate serial numbers")
    serial.add_argument(
        "-d",
        "--display-as",
        default="int",
        help="Display mode: int, hex, uhex (default: int)"
    )
    serial.add_argument("files", metavar="FILES", nargs="+", help="Certificate files")
    serial.set_defaults(func=cmd_serial)

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    bits = getattr(args, "bits", None)

    try:
        settings = Settings(
            verbose         = args.verbose,
            debug           = args.debug,
            display_mode    = args.display,
            key_algorithm   = getattr(args, "algorithm", "ecdsa"),
            rsa_bits        = 2048 if bits is None else bits,
            ec_curve        = 256 if bits is None else bits,
        )
        configure_logging(settings)
        return args.func(args, settings)
    except (CertkitError, OSError) as e:
        logger.error(f"{args.command}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
