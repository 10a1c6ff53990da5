"""
Response formatting and batch export of classification results.
"""

import json
from typing import List, Optional, Sequence

import pandas as pd

from .types import ClassificationResult

COLUMNS = [
    'source',
    'protocol',
    'protocol_display',
    'operation',
    'message',
    'data_length',
    'raw_hex',
    'raw_ascii',
    'fields',
]


def format_result(result: ClassificationResult) -> str:
    """
    Render a result as a human-readable console block.

    One summary line followed by one "key = value" line per field.
    """
    lines = [f"{result.label.value} - {result.operation}"]
    for key in sorted(result.fields):
        lines.append(f"   {key} = {json.dumps(result.fields[key], ensure_ascii=False)}")
    return "\n".join(lines)


def results_to_dataframe(results: Sequence[ClassificationResult],
                         sources: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """
    Build a DataFrame with one row per classified message.

    Args:
        results: Classification results
        sources: Optional label per result (file name, connection id...)

    Returns:
        DataFrame with COLUMNS; fields are serialized as JSON text
    """
    if sources is not None and len(sources) != len(results):
        raise ValueError(f"got {len(sources)} sources for {len(results)} results")

    rows = []
    for i, result in enumerate(results):
        rows.append({
            'source': sources[i] if sources is not None else str(i),
            'protocol': result.label.value,
            'protocol_display': result.display,
            'operation': result.operation,
            'message': result.message,
            'data_length': result.data_length,
            'raw_hex': result.raw_hex,
            'raw_ascii': result.raw_ascii,
            'fields': json.dumps(result.fields, sort_keys=True, ensure_ascii=False),
        })
    return pd.DataFrame(rows, columns=COLUMNS)


def summarize(results: Sequence[ClassificationResult]) -> pd.DataFrame:
    """
    Count classified messages per protocol.

    Returns:
        DataFrame with columns protocol, messages (sorted by protocol)
    """
    df = results_to_dataframe(results)
    counts = df.groupby('protocol').size().reset_index(name='messages')
    return counts.sort_values('protocol').reset_index(drop=True)


def export_csv(results: Sequence[ClassificationResult], output_path: str,
               sources: Optional[Sequence[str]] = None):
    """Export classification results to CSV."""
    df = results_to_dataframe(results, sources)
    df.to_csv(output_path, index=False)


def export_json(results: Sequence[ClassificationResult], output_path: str,
                sources: Optional[Sequence[str]] = None):
    """Export classification results to JSON (full response objects)."""
    if sources is not None and len(sources) != len(results):
        raise ValueError(f"got {len(sources)} sources for {len(results)} results")

    data: List[dict] = []
    for i, result in enumerate(results):
        entry = result.to_dict()
        entry['source'] = sources[i] if sources is not None else str(i)
        data.append(entry)

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
