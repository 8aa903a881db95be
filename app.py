"""
Service ROI Calculator — Flask API Server
Human vs AI customer service: every input change posts the full parameter
snapshot to /api/recalculate and gets both channels back, recomputed from scratch.
"""
import io
import json
import os
import logging
from flask import Flask, jsonify, request, render_template, send_file
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

from engines.comparison import run_comparison
from engines.conversion import estimate_conversion_rate, conversion_table
from engines.data_loader import load_parameters, default_params, merge_params, parameters_path, EDITABLE_PARAMS
from engines.errors import InvalidInputError

logger = logging.getLogger(__name__)

app = Flask(__name__)

# Only the defaults live here; each request computes from its own copy
STATE = {'params': None, 'loaded': False, '_load_error': None}


def _load():
    try:
        STATE['params'] = load_parameters()
        STATE['_load_error'] = None
    except Exception as e:
        # a broken workbook must not take the calculator down
        logger.exception("Failed to load %s — falling back to defaults", parameters_path())
        STATE['_load_error'] = f"{type(e).__name__}: {e}"
        STATE['params'] = default_params()
    STATE['loaded'] = True


@app.before_request
def _ensure_loaded():
    if not STATE['loaded']:
        _load()


def _request_params():
    body = request.get_json(silent=True)
    if body is None:
        body = {}
    if not isinstance(body, dict):
        raise InvalidInputError('params', "request body must be a JSON object")
    updates = body.get('params', {})
    if not isinstance(updates, dict):
        raise InvalidInputError('params', "'params' must be an object")
    return merge_params(STATE['params'], updates)


@app.errorhandler(InvalidInputError)
def _invalid_input(e):
    logger.info("Rejected input: %s (%s)", e, e.field)
    return jsonify(e.to_dict()), 400


# ══════════════════════════════════════════════════════════════
#  ROUTES
# ══════════════════════════════════════════════════════════════

@app.route('/')
def index():
    try:
        server_data = run_comparison(STATE['params'])
    except InvalidInputError as e:
        return render_template('index.html', server_data=None, load_error=str(e))
    return render_template('index.html', server_data=json.dumps(server_data, default=str),
                           load_error=STATE['_load_error'])


@app.route('/api/data')
def api_data():
    result = run_comparison(STATE['params'])
    result['loadError'] = STATE['_load_error']
    return jsonify(result)


@app.route('/api/parameters')
def api_parameters():
    return jsonify({'params': STATE['params'], 'editable': list(EDITABLE_PARAMS),
                    'source': parameters_path(), 'loadError': STATE['_load_error']})


@app.route('/api/recalculate', methods=['POST'])
def api_recalculate():
    """Recompute both channels for the posted params merged over the defaults.
    Nothing is stored: the defaults are never mutated by a request.
    """
    try:
        params = _request_params()
        return jsonify({'status': 'ok', 'data': run_comparison(params)})
    except InvalidInputError:
        raise
    except Exception as e:
        logger.exception("Recalculation failed")
        return jsonify({'status': 'error', 'message': str(e)}), 500


@app.route('/api/conversion-rate')
def api_conversion_rate():
    minutes = request.args.get('minutes')
    if minutes is None:
        return jsonify({'table': conversion_table()})
    rate = estimate_conversion_rate(minutes)
    return jsonify({'minutes': float(minutes), 'conversionRate': rate})


@app.route('/api/refresh', methods=['POST'])
def api_refresh():
    """Re-read the parameters workbook."""
    _load()
    if STATE['_load_error']:
        return jsonify({'status': 'error', 'message': STATE['_load_error'], 'params': STATE['params']}), 500
    return jsonify({'status': 'ok', 'message': 'Parameters reloaded', 'params': STATE['params']})


@app.route('/api/export', methods=['GET', 'POST'])
def api_export():
    """Export the comparison for the current (or posted) params to Excel."""
    params = _request_params() if request.method == 'POST' else STATE['params']
    result = run_comparison(params)
    try:
        buf = _build_workbook(result)
    except Exception as e:
        logger.exception("Export failed")
        return jsonify({'error': str(e)}), 500
    return send_file(buf, as_attachment=True, download_name='Comparativo_Atendimento.xlsx',
                     mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet')


# ══════════════════════════════════════════════════════════════
#  HELPERS
# ══════════════════════════════════════════════════════════════

def _build_workbook(result):
    wb = Workbook()
    hf = Font(bold=True, color='FFFFFF', size=11)
    hfill = PatternFill(start_color='2E2E38', end_color='2E2E38', fill_type='solid')
    tb = Border(left=Side(style='thin'), right=Side(style='thin'),
                top=Side(style='thin'), bottom=Side(style='thin'))

    def ws_write(ws, headers, rows):
        for c, h in enumerate(headers, 1):
            cell = ws.cell(row=1, column=c, value=h)
            cell.font = hf; cell.fill = hfill; cell.alignment = Alignment(horizontal='center'); cell.border = tb
        for r, row in enumerate(rows, 2):
            for c, val in enumerate(row, 1):
                cell = ws.cell(row=r, column=c, value=val); cell.border = tb
        for col in ws.columns:
            ml = max(len(str(cell.value or '')) for cell in col)
            ws.column_dimensions[col[0].column_letter].width = min(ml + 2, 40)

    p = result['params']; rates = result['hourlyRates']
    hm = result['human']; am = result['automated']

    ws = wb.active; ws.title = 'Resumo'
    ws_write(ws, ['Parâmetro', 'Valor'], [
        ['Atendimentos por Dia', p['contactsPerDay']],
        ['Tempo de Resposta Humano (min)', p['responseTime']],
        ['Valor do Ticket', p['ticketValue']],
        ['Investimento Mensal Humano', p['humanMonthlyCost']],
        ['Investimento Mensal IA', p['aiCostPerMonth']],
        ['Custo por Hora Humano', rates['humanCostPerHourFormatted']],
        ['Custo por Hora IA', rates['aiCostPerHourFormatted']],
    ])

    ws2 = wb.create_sheet('Comparativo')
    ws_write(ws2, ['Métrica', hm['label'], am['label']], [
        ['Atendimentos/mês', hm['respondedContacts'], am['respondedContacts']],
        ['Taxa de Conversão (%)', hm['conversionRate'], am['conversionRate']],
        ['Conversões', hm['conversions'], am['conversions']],
        ['Faturamento', hm['revenueFormatted'], am['revenueFormatted']],
        ['Custo Mensal', hm['monthlyCostFormatted'], am['monthlyCostFormatted']],
        ['Custo por Atendimento', hm['costPerAttendanceFormatted'], am['costPerAttendanceFormatted']],
        ['Perda Mensal', hm['lostRevenueFormatted'], am['lostRevenueFormatted']],
        ['Receita Anual', hm['annualRevenueFormatted'], am['annualRevenueFormatted']],
        ['Investimento Anual', hm['annualCostFormatted'], am['annualCostFormatted']],
        ['Lucro Anual', hm['annualProfitFormatted'], am['annualProfitFormatted']],
    ])

    ws3 = wb.create_sheet('Taxa de Conversão')
    ws_write(ws3, ['De (min)', 'Até (min)', 'Conversão (%)'], [
        [row['fromMinutes'], row['toMinutes'] if row['toMinutes'] is not None else '∞', row['conversionRate']]
        for row in result['conversionTable']
    ])

    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)
    return buf


if __name__ == '__main__':
    logging.basicConfig(level=os.environ.get('LOG_LEVEL', 'INFO'),
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    app.run(debug=False, host='0.0.0.0', port=int(os.environ.get('PORT', 5000)))
