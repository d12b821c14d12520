import pandas as pd

from fixed_point import from_units, to_units

COLUMNS = ['Address', 'Staked Balance', 'Owed sUSD', 'Readable Staked Balance', 'Readable Owed sUSD']
PRICE_ROW = 'Price'
FEE_ROW = 'Exchange Fee'


def format_owed_balances(result, frozen_price, exchange_fee):
    lines = [','.join(COLUMNS)]
    for record in result.records:
        lines.append(f'{record.address},{record.balance},{record.owed},'
                     f'{record.readable_balance},{record.readable_owed}')
    lines.append('')
    lines.append(f'{PRICE_ROW},{from_units(frozen_price)}')
    lines.append(f'{FEE_ROW},{from_units(exchange_fee)}')
    return '\n'.join(lines) + '\n'


def save_owed_balances(result, frozen_price, exchange_fee, output_file):
    # Render everything before opening the file so it is never half written
    csv_string = format_owed_balances(result, frozen_price, exchange_fee)
    print(f"Saving results to {output_file}...")
    with open(output_file, 'w') as f:
        f.write(csv_string)
    print(f"Finished writing {len(result.records):,} records to {output_file}")


def load_owed_balances(path):
    """Read a saved report back.

    Returns (rows, frozen_price, exchange_fee). Raw amount columns are
    converted to ints so they can be re-checked exactly; the price and fee
    come back in base units.
    """
    df = pd.read_csv(path, dtype=str, keep_default_na=False, skip_blank_lines=True)
    missing = [c for c in COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"{path} is missing columns: {', '.join(missing)}")

    params = df[df['Address'].isin([PRICE_ROW, FEE_ROW])]
    params = dict(zip(params['Address'], params['Staked Balance']))
    if PRICE_ROW not in params or FEE_ROW not in params:
        raise ValueError(f"{path} has no trailing {PRICE_ROW}/{FEE_ROW} rows")

    rows = df[~df['Address'].isin([PRICE_ROW, FEE_ROW])].reset_index(drop=True)
    rows['Staked Balance'] = rows['Staked Balance'].map(int)
    rows['Owed sUSD'] = rows['Owed sUSD'].map(int)
    return rows, to_units(params[PRICE_ROW]), to_units(params[FEE_ROW])
