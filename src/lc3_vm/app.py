# src/lc3_vm/app.py
"""
コマンドラインのエントリポイント。
イメージファイルをロードし、端末をrawモードにしてHALTまでLC-3プログラムを実行します。
"""
import argparse
import logging
import sys
from typing import List, Optional

from lc3_vm.config.builder import SystemBuilder
from lc3_vm.config.loader import ConfigLoader, ConfigError
from lc3_vm.config.models import SystemConfig
from lc3_vm.core.errors import CpuFault
from lc3_vm.loader.loader import ImageLoader, ImageLoadError
from lc3_vm.transport.console import Console, TerminalConsole
from lc3_vm.transport.terminal import raw_terminal

logger = logging.getLogger("lc3_vm")

EXIT_OK = 0
EXIT_LOAD_FAILURE = 1
EXIT_USAGE = 2
EXIT_CPU_FAULT = 3
EXIT_INPUT_CLOSED = 4
EXIT_INTERRUPTED = 130

def non_negative_int(text: str) -> int:
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {value}")
    return value

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lc3-vm",
        description="Run LC-3 program images until the HALT trap.",
        usage="%(prog)s [options] [image-file1] ...",
    )
    parser.add_argument("images", nargs="*", metavar="image-file",
                        help="Big-endian LC-3 object file(s), loaded in order")
    parser.add_argument("-c", "--config", help="YAML system configuration")
    parser.add_argument("--max-steps", type=non_negative_int, default=None,
                        help="Stop after this many instructions (0 or omitted: unlimited)")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Increase log verbosity (-v info, -vv instruction trace)")
    parser.add_argument("-q", "--quiet", action="store_true",
                        help="Only log errors")
    return parser

# @intent:responsibility -v/-qに応じてログレベルを設定します。ログは標準エラー出力へ送り、エミュレートされたコンソール出力と混ぜません。
def setup_logging(verbose: int, quiet: bool) -> None:
    if quiet:
        level = logging.ERROR
    elif verbose == 0:
        level = logging.WARNING
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    logging.basicConfig(level=level, handlers=[handler], force=True)

# @intent:responsibility 構成を読み込み、システムを組み立て、実行して終了ステータスを返します。
def run(argv: Optional[List[str]] = None, console: Optional[Console] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose, args.quiet)

    try:
        config = ConfigLoader().load_from_file(args.config) if args.config else SystemConfig.default()
    except (OSError, ConfigError) as e:
        print(f"failed to load config: {e}", file=sys.stderr)
        return EXIT_LOAD_FAILURE

    if not config.images and not args.images:
        parser.print_usage(sys.stderr)
        return EXIT_USAGE

    console = console if console is not None else TerminalConsole()
    try:
        cpu, bus = SystemBuilder().build_system(config, console)
        ImageLoader().load_images(args.images, bus)
    except ImageLoadError as e:
        print(str(e), file=sys.stderr)
        return EXIT_LOAD_FAILURE
    except ConfigError as e:
        print(f"failed to load config: {e}", file=sys.stderr)
        return EXIT_LOAD_FAILURE

    max_steps = args.max_steps if args.max_steps is not None else config.max_steps
    try:
        with raw_terminal():
            executed = cpu.run(max_steps=max_steps or None)
    except KeyboardInterrupt:
        # 端末設定はraw_terminalのfinallyで復元済み
        print()
        return EXIT_INTERRUPTED
    except CpuFault as e:
        logger.error("%s", e)
        return EXIT_CPU_FAULT
    except EOFError:
        logger.error("Console input closed while the program was waiting for a key")
        return EXIT_INPUT_CLOSED

    logger.info("Executed %d instructions", executed)
    return EXIT_OK

def main():
    sys.exit(run())

if __name__ == '__main__':
    main()
