import math

import pandas as pd


def summarize(records):
    """Counts shown to the operator after an upload."""
    df = pd.DataFrame(list(records))
    if df.empty:
        return {"count": 0, "unique_roles": 0, "sectors": 0, "average_salary": 0.0}

    def _distinct(col):
        if col not in df.columns:
            return 0
        s = df[col].dropna()
        s = s[s.astype(str).str.strip() != ""]
        return int(s.nunique())

    avg = 0.0
    if "base_salary" in df.columns:
        salaries = pd.to_numeric(df["base_salary"], errors="coerce").dropna()
        if not salaries.empty:
            avg = round(float(salaries.mean()), 2)

    return {
        "count": int(len(df)),
        "unique_roles": _distinct("role"),
        "sectors": _distinct("sector"),
        "average_salary": avg,
    }


def salary_stats(values):
    """
    Quartiles by sorted index (floor(n * q)), same as the compare view.
    Empty input gives zeros.
    """
    salaries = sorted(
        float(v) for v in values
        if v is not None and not (isinstance(v, float) and math.isnan(v))
    )
    n = len(salaries)
    if n == 0:
        return {"percentile_25": 0, "percentile_50": 0, "percentile_75": 0, "mean": 0, "count": 0}
    return {
        "percentile_25": salaries[math.floor(n * 0.25)],
        "percentile_50": salaries[math.floor(n * 0.5)],
        "percentile_75": salaries[math.floor(n * 0.75)],
        "mean": round(sum(salaries) / n, 2),
        "count": n,
    }
