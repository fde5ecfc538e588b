#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# =============================================================================
# Testcase Keyword Mapper CLI
#
# 목적
# - 한글 테스트케이스(Summary/Precondition/Steps/Expected Result)를 읽어
#   카탈론 WebUI Groovy 스크립트 골격을 생성한다.
# - 단일 구문(--phrase) 또는 CSV 일괄 처리(--batch_csv)도 지원한다.
#
# 산출물 (--out)
# - script.groovy      : 조립된 @Test 스크립트 (--input 사용 시)
# - analysis.json      : 항목별 매핑 결과 / 매핑률 / 권장사항 / 통계
# - mapping_log.jsonl  : 구문 1건당 1줄 매핑 로그
# - results.csv        : 일괄 처리 결과 (--batch_csv 사용 시)
# - index.html         : 결과 요약 표
#
# 실행 예
#   python testcase_mapper.py --input tc.txt --out out/
#   python testcase_mapper.py --phrase "로그인 버튼 클릭" --phrase "총 개수 확인" --out out/
#   python testcase_mapper.py --batch_csv phrases.csv --out out/
# =============================================================================

import argparse
import os
import sys
from typing import Any, Dict, List

import pandas as pd

from keyword_mapping.models import MappingResult
from keyword_mapping.report import build_html_report
from keyword_mapping.resolver import UnifiedResolver, create_resolver
from keyword_mapping.settings import append_jsonl, ensure_dir, log, now_iso, write_json
from keyword_mapping.testcase import analyze_testcase, assemble_script

# 일괄 처리 CSV에서 구문을 읽을 컬럼 이름 (없으면 첫 번째 컬럼)
BATCH_COLUMN = "phrase"


def _row(result: MappingResult, section: str = "") -> Dict[str, Any]:
    return {
        "section": section,
        "text": result.keyword,
        "found": result.found,
        "action": result.action,
        "source": result.source.value,
        "confidence": result.confidence,
        "table": result.table,
        "reason": result.reason,
        "suggestions": [s.keyword for s in result.suggestions[:3]],
    }


def _log_row(log_path: str, phase: str, row: Dict[str, Any]) -> None:
    append_jsonl(log_path, {
        "ts": now_iso(),
        "phase": phase,
        "section": row["section"],
        "text": row["text"],
        "found": row["found"],
        "action": row["action"],
        "source": row["source"],
        "confidence": row["confidence"],
    })


# -----------------------------------------------------------------------------
# [Modes]
# -----------------------------------------------------------------------------
def run_testcase(resolver: UnifiedResolver, text: str, out_dir: str) -> Dict[str, Any]:
    analysis = analyze_testcase(resolver, text)
    script = assemble_script(analysis)

    with open(os.path.join(out_dir, "script.groovy"), "w", encoding="utf-8") as f:
        f.write(script)

    log_path = os.path.join(out_dir, "mapping_log.jsonl")
    rows = []
    for item in analysis.items:
        row = _row(item.result, item.section)
        rows.append(row)
        _log_row(log_path, "testcase", row)

    log(f"testcase analyzed: items={len(analysis.items)} mapping_rate={analysis.overall_mapping_rate}%")
    for rec in analysis.recommendations:
        if rec["type"] == "critical":
            log(f"WARN: {rec['message']}")

    return {"mode": "testcase", "analysis": analysis.to_dict(), "rows": rows,
            "mapping_rate": analysis.overall_mapping_rate}


def run_phrases(resolver: UnifiedResolver, phrases: List[str], out_dir: str, phase: str) -> Dict[str, Any]:
    log_path = os.path.join(out_dir, "mapping_log.jsonl")
    rows = []
    results = resolver.resolve_batch(phrases)
    for result in results:
        row = _row(result)
        rows.append(row)
        _log_row(log_path, phase, row)
        log(result.brief())

    mapped = sum(1 for r in rows if r["found"])
    rate = int(mapped * 100 / len(rows) + 0.5) if rows else 0
    return {"mode": phase, "results": [r.to_dict() for r in results], "rows": rows, "mapping_rate": rate}


def read_batch_csv(path: str) -> List[str]:
    # 빈 칸은 NaN("nan")이 아니라 빈 문자열로 읽고 건너뛴다.
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    column = BATCH_COLUMN if BATCH_COLUMN in df.columns else df.columns[0]
    return [v.strip() for v in df[column].tolist() if v.strip()]


# -----------------------------------------------------------------------------
# [Entry Point] CLI 인자 처리
# -----------------------------------------------------------------------------
def main() -> None:
    parser = argparse.ArgumentParser(description="Korean testcase keyword -> Katalon action mapper")

    # -------------------------------------------------------------------------
    # input / phrase / batch_csv
    # - 셋 중 하나 이상 필요하다.
    # - input: 테스트케이스 텍스트 파일
    # - phrase: 단일 구문 (여러 번 지정 가능)
    # - batch_csv: "phrase" 컬럼(또는 첫 컬럼)을 가진 CSV
    # -------------------------------------------------------------------------
    parser.add_argument("--input", help="Path to testcase text file")
    parser.add_argument("--phrase", action="append", default=[], help="Single phrase to resolve (repeatable)")
    parser.add_argument("--batch_csv", help="CSV file of phrases")

    # -------------------------------------------------------------------------
    # out / data_dir
    # - data_dir 미지정 시 KWMAP_DATA_DIR 또는 동봉 데이터를 사용한다.
    # -------------------------------------------------------------------------
    parser.add_argument("--out", required=True, help="Output directory for artifacts")
    parser.add_argument("--data_dir", default=None, help="Directory holding mapping JSON tables")
    parser.add_argument("--renderer", default="katalon", help="Script renderer name")

    args = parser.parse_args()

    if not (args.input or args.phrase or args.batch_csv):
        log("CRITICAL: one of --input, --phrase, --batch_csv is required")
        sys.exit(1)

    ensure_dir(args.out)

    try:
        resolver = create_resolver(args.data_dir, renderer_name=args.renderer)
    except ValueError as e:
        log(f"CRITICAL: {e}")
        sys.exit(1)
    if not resolver.is_initialized:
        log(f"CRITICAL: mapping tables unavailable: {', '.join(resolver.missing_tables)}")
        sys.exit(1)

    outputs: List[Dict[str, Any]] = []

    if args.input:
        try:
            with open(args.input, "r", encoding="utf-8") as f:
                text = f.read()
        except Exception as e:
            log(f"CRITICAL: cannot read input: {args.input} / error={e}")
            sys.exit(1)
        outputs.append(run_testcase(resolver, text, args.out))

    if args.phrase:
        outputs.append(run_phrases(resolver, args.phrase, args.out, "phrase"))

    if args.batch_csv:
        try:
            phrases = read_batch_csv(args.batch_csv)
        except Exception as e:
            log(f"CRITICAL: cannot read batch_csv: {args.batch_csv} / error={e}")
            sys.exit(1)
        batch = run_phrases(resolver, phrases, args.out, "batch")
        pd.DataFrame(batch["rows"]).to_csv(os.path.join(args.out, "results.csv"), index=False)
        outputs.append(batch)

    stats = resolver.get_statistics()
    rows = [r for o in outputs for r in o["rows"]]
    mapped = sum(1 for r in rows if r["found"])
    rate = int(mapped * 100 / len(rows) + 0.5) if rows else 0

    write_json(os.path.join(args.out, "analysis.json"), {
        "generated_at": now_iso(),
        "outputs": [{k: v for k, v in o.items() if k != "rows"} for o in outputs],
        "statistics": stats,
    })
    with open(os.path.join(args.out, "index.html"), "w", encoding="utf-8") as f:
        f.write(build_html_report(rows, stats, rate))

    log(
        f"done: queries={stats['total_queries']} mapped={mapped}/{len(rows)} "
        f"cache_hit_rate={stats['cache_hit_rate']:.2f} out={args.out}"
    )


if __name__ == "__main__":
    main()
