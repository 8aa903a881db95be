"""
Service ROI Calculator — Parameter Loader
Default inputs, optional consultant override file (data/config/parameters.xlsx),
and merging of request payloads over those defaults.
"""
import os, re, logging
import openpyxl

logger = logging.getLogger(__name__)

DATA_DIR = os.environ.get(
    'CALCULATOR_DATA_DIR',
    os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'data'),
)

# Inputs the screen lets the user edit; the rest come from the file or the API only
EDITABLE_PARAMS = ('contactsPerDay', 'responseTime', 'ticketValue', 'humanMonthlyCost')

# Workbook label -> parameter key. Portuguese labels match the screen.
PARAM_MAP = {
    'Contacts per Day': 'contactsPerDay', 'Atendimentos por Dia': 'contactsPerDay',
    'Response Time (min)': 'responseTime', 'Tempo de Resposta (min)': 'responseTime',
    'Ticket Value': 'ticketValue', 'Valor do Ticket': 'ticketValue',
    'Human Monthly Cost': 'humanMonthlyCost', 'Investimento Mensal Humano': 'humanMonthlyCost',
    'AI Monthly Cost': 'aiCostPerMonth', 'Investimento Mensal IA': 'aiCostPerMonth',
    'Human Cost per Hour': 'humanCostPerHour', 'Custo por Hora Humano': 'humanCostPerHour',
    'AI Cost per Hour': 'aiCostPerHour', 'Custo por Hora IA': 'aiCostPerHour',
}

# '1.200', '12.345.678': dots as thousands separators, no decimal part
THOUSANDS_ONLY = re.compile(r'^-?\d{1,3}(\.\d{3})+$')


def default_params():
    return {
        'contactsPerDay': 100,
        'responseTime': 180,
        'ticketValue': 1200,
        'humanMonthlyCost': 4000,
        'aiCostPerMonth': 1500,
        # None = derive from the monthly budget
        'humanCostPerHour': None,
        'aiCostPerHour': None,
    }


def read_xlsx_sheet(filepath, sheet_name=None):
    wb = openpyxl.load_workbook(filepath, read_only=True, data_only=True)
    try:
        ws = wb[sheet_name] if sheet_name else wb.active
        rows = list(ws.iter_rows(values_only=True))
    finally:
        wb.close()
    if len(rows) < 2:
        return []
    headers = [str(h).strip() if h else f'col_{i}' for i, h in enumerate(rows[0])]
    return [dict(zip(headers, row)) for row in rows[1:]]


def parse_number(text):
    """Numeric text typed the pt-BR way or the plain way.

    '1.200' -> 1200, '1.234,5' -> 1234.5, '2000,5' -> 2000.5, '2.5' -> 2.5.
    Raises ValueError for anything else.
    """
    t = text.strip().replace(' ', '').replace('\xa0', '')
    if ',' in t:
        t = t.replace('.', '').replace(',', '.')
    elif THOUSANDS_ONLY.match(t):
        t = t.replace('.', '')
    return float(t)


def parameters_path(data_dir=None):
    return os.path.join(data_dir or DATA_DIR, 'config', 'parameters.xlsx')


def load_parameters(path=None):
    """Defaults overlaid with the Parameter/Value rows of the workbook, if present.
    Unknown labels and non-numeric values are skipped with a warning.
    """
    path = path or parameters_path()
    p = default_params()
    if not os.path.exists(path):
        logger.info("No parameters workbook at %s, using defaults", path)
        return p
    rows = read_xlsx_sheet(path)
    applied = 0
    for row in rows:
        label = str(row.get('Parameter') or '').strip()
        val = row.get('Value')
        if not label:
            continue
        if label not in PARAM_MAP:
            logger.warning("parameters.xlsx: unknown parameter '%s' ignored", label)
            continue
        if val is None or val == '':
            continue
        if isinstance(val, str):
            try:
                val = parse_number(val)
            except ValueError:
                logger.warning("parameters.xlsx: non-numeric value %r for '%s' ignored", val, label)
                continue
        p[PARAM_MAP[label]] = val
        applied += 1
    logger.info("Loaded %d parameter(s) from %s", applied, path)
    return p


def merge_params(base, updates):
    """Copy of base with known keys from updates applied; unknown keys are dropped."""
    merged = dict(base)
    for key, value in (updates or {}).items():
        if key in merged:
            merged[key] = value
        else:
            logger.warning("Ignoring unknown parameter '%s'", key)
    return merged
