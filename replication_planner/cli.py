"""argparse エントリポイント。"""

import argparse
import dataclasses
import json
import logging
import sys

from replication_planner.config import GlobalConfig, IntegrationPattern
from replication_planner.engine import CapacityEstimator
from replication_planner.loader import TopologyError, load_topology
from replication_planner.report import render_summary
from replication_planner.topology import Topology

logger = logging.getLogger("replication_planner")

# クラスタ上限を超えたときの終了コード
EXIT_BREACHED = 2


def _load(args: argparse.Namespace) -> tuple[Topology, GlobalConfig]:
    """--topology があれば読み込み、なければデモ用トポロジ。"""
    if args.topology is None:
        logger.info("no --topology given, using the sample topology")
        return Topology.sample(), GlobalConfig()
    return load_topology(args.topology)


def _override(config: GlobalConfig, args: argparse.Namespace) -> GlobalConfig:
    """コマンドライン指定で設定を上書きする。"""
    changes = {}
    if args.pattern is not None:
        changes["integration_pattern"] = IntegrationPattern(args.pattern.upper())
    if args.overhead_ms is not None:
        changes["middleware_overhead_ms"] = args.overhead_ms
    if args.concurrency is not None:
        changes["concurrency"] = args.concurrency
    return dataclasses.replace(config, **changes)


def _cmd_estimate(args: argparse.Namespace) -> int:
    """単一見積もり実行。"""
    topology, config = _load(args)
    config = _override(config, args)
    result = CapacityEstimator(topology, config).run()

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(render_summary(result))

    if result.breached_clusters:
        return EXIT_BREACHED
    return 0


def _cmd_explore(args: argparse.Namespace) -> int:
    """グリッドサーチ実行。"""
    from replication_planner.explore import print_summary, run_grid_search

    if not args.summary:
        topology, _ = _load(args)
        run_grid_search(topology, output_csv=args.output)
    print_summary(args.output)
    return 0


def _cmd_charts(args: argparse.Namespace) -> int:
    """Mermaid チャート生成。"""
    from replication_planner.charts import CHARTS

    topology, config = _load(args)

    if args.chart == "all":
        charts = list(CHARTS.keys())
    else:
        charts = [args.chart]

    sections = []
    for name in charts:
        sections.append(f"## {name}\n")
        sections.append(CHARTS[name](topology, config.middleware_overhead_ms))
        sections.append("")

    output = "\n".join(sections)

    if args.output:
        with open(args.output, "w") as f:
            f.write(output + "\n")
        print(f"Charts written to {args.output}")
    else:
        print(output)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """ArgumentParser を構築する。"""
    parser = argparse.ArgumentParser(
        prog="replication-planner",
        description="ミドルウェア経由のデータレプリケーション負荷見積もり",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="DEBUG ログを出す"
    )
    sub = parser.add_subparsers(dest="command")

    # --- estimate ---
    est_p = sub.add_parser("estimate", help="単一見積もり実行")
    est_p.add_argument("--topology", default=None, help="トポロジ JSON")
    est_p.add_argument("--pattern", choices=["async", "sync"], default=None)
    est_p.add_argument("--overhead-ms", type=float, default=None)
    est_p.add_argument("--concurrency", type=int, default=None)
    est_p.add_argument(
        "--json", action="store_true", help="結果を JSON で出力"
    )

    # --- explore ---
    exp_p = sub.add_parser("explore", help="グリッドサーチ実行")
    exp_p.add_argument("--topology", default=None, help="トポロジ JSON")
    exp_p.add_argument(
        "--output", default="exploration_results.csv", help="CSV 出力先"
    )
    exp_p.add_argument(
        "--summary", action="store_true", help="サマリーのみ表示"
    )

    # --- charts ---
    ch_p = sub.add_parser("charts", help="Mermaid チャート生成")
    ch_p.add_argument("--topology", default=None, help="トポロジ JSON")
    ch_p.add_argument(
        "--chart", default="all", choices=["all", "concurrency", "pattern"]
    )
    ch_p.add_argument("--output", default=None, help="Markdown 出力先")

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI エントリポイント。"""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 1

    dispatch = {
        "estimate": _cmd_estimate,
        "explore": _cmd_explore,
        "charts": _cmd_charts,
    }
    try:
        return dispatch[args.command](args)
    except (TopologyError, OSError) as e:
        parser.exit(1, f"error: {e}\n")


if __name__ == "__main__":
    sys.exit(main())
