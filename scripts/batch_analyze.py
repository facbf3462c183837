import pandas as pd
import argparse
import os
import sys

# Add backend to sys.path to import the package without installing it
# This assumes the script is in 'scripts/' and 'backend/' is a sibling
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'backend'))
from korean_barista.services.barista_service import analyze_input

def batch_analyze(input_csv: str, output_csv: str):
    """
    Runs the barista analysis over a CSV of attempts.
    Expected columns: 'input', 'target' and optionally 'wpm'.
    Writes the rows back with 'score', 'mistakes', 'feedback' and 'correction_types'.
    """
    print(f"Loading attempts from: {input_csv}")
    if not os.path.exists(input_csv):
        print(f"Error: attempts CSV not found at {input_csv}")
        return

    df = pd.read_csv(input_csv)
    missing_columns = {'input', 'target'} - set(df.columns)
    if missing_columns:
        print(f"Error: CSV is missing required columns: {sorted(missing_columns)}")
        return

    df['input'] = df['input'].fillna('').astype(str)
    df['target'] = df['target'].fillna('').astype(str)
    if 'wpm' not in df.columns:
        df['wpm'] = 0
    df['wpm'] = pd.to_numeric(df['wpm'], errors='coerce').fillna(0)

    print(f"Analyzing {len(df)} attempts...")
    results = [analyze_input(r['input'], r['target'], r['wpm']) for _, r in df.iterrows()]
    df['score'] = [r.score for r in results]
    df['mistakes'] = [r.mistakes for r in results]
    df['feedback'] = [r.feedback for r in results]
    df['correction_types'] = [";".join(c.type for c in r.corrections) for r in results]

    df.to_csv(output_csv, index=False)
    print(f"Results saved to: {output_csv}")

    if len(df):
        print(f"Average score: {df['score'].mean():.1f}")
        type_counts = df['correction_types'].str.split(';').explode()
        print(f"Corrections by type:\n{type_counts[type_counts != ''].value_counts()}")

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run the typing barista over a CSV of attempts.")
    parser.add_argument("input_csv")
    parser.add_argument("output_csv", nargs="?", default="analysis_results.csv")
    args = parser.parse_args()
    batch_analyze(args.input_csv, args.output_csv)
