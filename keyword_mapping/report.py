# -*- coding: utf-8 -*-
from html import escape
from typing import Any, Dict, List, Optional


def _esc(value: Any) -> str:
    return escape(str("" if value is None else value), quote=True)


def build_html_report(
    rows: List[Dict[str, Any]],
    stats: Optional[Dict[str, Any]] = None,
    mapping_rate: Optional[int] = None,
) -> str:
    """
    매핑 결과를 단일 HTML 표로 만든다.
    - rows: section/text/found/action/source/confidence (+ suggestions)
    - 산출물 링크(script.groovy / analysis.json / mapping_log.jsonl)를 포함한다.
    """
    html = """
<html>
<head>
<meta charset="utf-8"/>
<style>
  body { font-family: Arial, sans-serif; margin: 18px; }
  table { border-collapse: collapse; width: 100%; }
  th, td { border: 1px solid #ddd; padding: 8px; vertical-align: top; }
  th { background: #f2f2f2; }
  .pass { color: #137333; font-weight: bold; }
  .fail { color: #b3261e; font-weight: bold; }
  .mono { font-family: Menlo, Consolas, monospace; font-size: 12px; }
</style>
</head>
<body>
<h2>Keyword Mapping Report</h2>
<div>
  <span>Artifacts:</span>
  <a href="script.groovy">script.groovy</a>
  |
  <a href="analysis.json">analysis.json</a>
  |
  <a href="mapping_log.jsonl">mapping_log.jsonl</a>
</div>
"""
    if mapping_rate is not None:
        html += f"<p>Mapping rate: <b>{mapping_rate}%</b></p>\n"
    if stats:
        by_source = ", ".join(f"{k}={v}" for k, v in stats.get("hits_by_source", {}).items())
        html += (
            f"<p class=\"mono\">queries={stats.get('total_queries', 0)} "
            f"failures={stats.get('failures', 0)} {_esc(by_source)}</p>\n"
        )

    html += """<br/>
<table>
<tr>
  <th style="width:110px;">Section</th>
  <th>Text</th>
  <th style="width:90px;">Result</th>
  <th style="width:200px;">Action</th>
  <th style="width:120px;">Source</th>
  <th style="width:80px;">Confidence</th>
  <th>Suggestions</th>
</tr>
"""
    for r in rows:
        found = bool(r.get("found"))
        cls = "pass" if found else "fail"
        conf = r.get("confidence")
        conf_txt = f"{conf:.2f}" if isinstance(conf, (int, float)) else "-"
        sugg = ", ".join(r.get("suggestions") or []) or "-"
        html += f"""
<tr>
  <td class="mono">{_esc(r.get("section") or "-")}</td>
  <td>{_esc(r.get("text"))}</td>
  <td class="{cls}">{"MAPPED" if found else "UNMAPPED"}</td>
  <td class="mono">{_esc(r.get("action") or "-")}</td>
  <td class="mono">{_esc(r.get("source"))}</td>
  <td class="mono">{conf_txt}</td>
  <td>{_esc(sugg)}</td>
</tr>
"""
    html += """
</table>
</body>
</html>
"""
    return html
