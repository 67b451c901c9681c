"""Page template for the tabbed tracker view (rendered with render_template_string)."""

PAGE_TEMPLATE = """
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{{ feature.title }} · Life Tracker</title>
  <link href="https://cdn.jsdelivr.net/npm/bootstrap@5.3.3/dist/css/bootstrap.min.css" rel="stylesheet">
  <script src="https://cdn.jsdelivr.net/npm/chart.js"></script>
  <style>
    body { padding-top: 2rem; }
    .muted { color: #6c757d; }
    .done { text-decoration: line-through; color: #6c757d; }
    .chart-wrap { position: relative; height: 200px; }
    .modal-backdrop-lite { background: rgba(0, 0, 0, .45); }
  </style>
</head>
<body>
{% macro keep() -%}
  {% if hidden %}<input type="hidden" name="_hide_balances" value="1">{% endif %}
{%- endmacro %}
{% macro input(field, value, prefix) -%}
  {% if field.kind == 'choice' %}
    <select class="form-select" id="{{ prefix }}{{ field.name }}" name="{{ field.name }}"{% if field.required %} required{% endif %}>
      {% if value in (none, '') %}<option value="">Select {{ field.label|lower }}</option>{% endif %}
      {% for opt_value, opt_label in field.choices %}
        <option value="{{ opt_value }}"{% if opt_value == value %} selected{% endif %}>{{ opt_label }}</option>
      {% endfor %}
    </select>
  {% else %}
    <input class="form-control" id="{{ prefix }}{{ field.name }}" name="{{ field.name }}" type="{{ field.html_type }}"
      {%- if field.kind == 'number' %} step="{{ '1' if field.integer else 'any' }}"{% endif %}
      value="{{ '' if value is none else value }}" placeholder="{{ field.placeholder }}"
      {%- if field.max_length %} maxlength="{{ field.max_length }}"{% endif %}
      {%- if field.required %} required{% endif %}>
  {% endif %}
{%- endmacro %}
<div class="container">
  <div class="d-flex flex-wrap justify-content-between align-items-start mb-3 gap-2">
    <div>
      <h1 class="mb-1">Life Tracker</h1>
      <div class="text-muted">Calories, workouts, weight, shopping and money in one place.</div>
    </div>
    {% if user_id %}
      <form class="d-flex align-items-center gap-2" method="post" action="{{ url_for('signout') }}">
        <span class="text-muted small">Signed in as {{ user_id }}</span>
        <button class="btn btn-sm btn-outline-secondary" type="submit">Sign Out</button>
      </form>
    {% else %}
      <form class="d-flex align-items-center gap-2" method="post" action="{{ url_for('signin') }}">
        <input type="hidden" name="_next" value="{{ feature.key }}">
        <input class="form-control form-control-sm" name="user_id" placeholder="Email" required>
        <button class="btn btn-sm btn-outline-primary" type="submit">Sign In</button>
      </form>
    {% endif %}
  </div>

  <ul class="nav nav-tabs mb-3 d-none d-md-flex">
    {% for f in features %}
      <li class="nav-item">
        <a class="nav-link{% if f.key == feature.key %} active{% endif %}" href="{{ url_for('tab', key=f.key) }}">{{ f.title }}</a>
      </li>
    {% endfor %}
  </ul>
  <div class="d-flex d-md-none justify-content-between align-items-center mb-3">
    <a class="btn btn-sm btn-outline-primary" href="{{ url_for('tab', key=prev_key) }}" id="prev-tab">◀</a>
    <strong>{{ feature.title }}</strong>
    <a class="btn btn-sm btn-outline-primary" href="{{ url_for('tab', key=next_key) }}" id="next-tab">▶</a>
  </div>

  {% with messages = get_flashed_messages(with_categories=true) %}
    {% for category, message in messages %}
      <div class="alert alert-{{ 'danger' if category == 'destructive' else 'info' }}">{{ message }}</div>
    {% endfor %}
  {% endwith %}

  <div class="row g-3 mb-3">
    {% for label, value in cards %}
      <div class="col-6 col-lg-3">
        <div class="card shadow-sm h-100">
          <div class="card-body">
            <div class="text-muted small">{{ label }}</div>
            <div class="fs-4 fw-semibold">{{ value }}</div>
          </div>
        </div>
      </div>
    {% endfor %}
  </div>
  {% if summary.progress_pct is defined and summary.total_count %}
    <div class="progress mb-3" style="height: 8px;">
      <div class="progress-bar" role="progressbar" style="width: {{ summary.progress_pct }}%;"></div>
    </div>
  {% endif %}

  {% if trend %}
    <div class="card shadow-sm mb-3">
      <div class="card-body">
        <h6 class="card-title">{{ feature.trend_title }}</h6>
        <div class="chart-wrap"><canvas id="trend_chart"></canvas></div>
      </div>
    </div>
  {% endif %}

  <div class="row g-4">
    <div class="col-12 col-xl-4">
      <div class="card shadow-sm">
        <div class="card-body">
          <h5 class="card-title">Add {{ feature.noun|lower }}</h5>
          <form method="post" action="{{ url_for('add', key=feature.key) }}">
            {{ keep() }}
            {% for field in feature.form_fields %}
              <div class="mb-3">
                <label class="form-label" for="add_{{ field.name }}">{{ field.label }}{% if field.required %} <span class="text-danger">*</span>{% endif %}</label>
                {{ input(field, field.default if field.kind == 'choice' else none, 'add_') }}
              </div>
            {% endfor %}
            <button class="btn btn-primary" type="submit">Add</button>
          </form>
        </div>
      </div>
    </div>

    <div class="col-12 col-xl-8">
      <div class="card shadow-sm">
        <div class="card-body">
          <div class="d-flex justify-content-between align-items-center mb-2">
            <h5 class="card-title mb-0">{{ feature.title }} ({{ entries|length }})</h5>
            <div class="d-flex gap-2">
              {% if feature.maskable %}
                <a class="btn btn-sm btn-outline-secondary" href="{{ url_for('tab', key=feature.key, hide_balances=none if hidden else 1) }}">{{ 'Show' if hidden else 'Hide' }} balances</a>
              {% endif %}
              {% if clearable %}
                <form method="post" action="{{ url_for('clear', key=feature.key) }}">
                  <button class="btn btn-sm btn-outline-secondary" type="submit">Clear Completed</button>
                </form>
              {% endif %}
            </div>
          </div>
          <div class="table-responsive">
            <table class="table table-sm align-middle">
              <thead>
                <tr>
                  {% for key, header, fmt in feature.columns %}<th>{{ header }}</th>{% endfor %}
                  <th></th>
                </tr>
              </thead>
              <tbody>
                {% for entry in entries %}
                  <tr id="entry-{{ entry.id }}">
                    {% for key, header, fmt in feature.columns %}
                      <td{% if feature.clear_field and entry[feature.clear_field] %} class="done"{% endif %}>{{ cell(entry, key, fmt) }}</td>
                    {% endfor %}
                    <td class="text-end">
                      <div class="d-flex justify-content-end flex-wrap gap-1">
                        {% for name in feature.quick_fields %}
                          {% set qf = feature.edit_field(name) %}
                          {% if not (hidden and qf.kind == 'number') %}
                            <form class="d-flex gap-1" method="post" action="{{ url_for('set_field', key=feature.key, entry_id=entry.id) }}">
                              {{ keep() }}
                              <input type="hidden" name="field" value="{{ name }}">
                              {% if qf.kind == 'choice' %}
                                <select class="form-select form-select-sm" name="value" onchange="this.form.submit()">
                                  {% for opt_value, opt_label in qf.choices %}
                                    <option value="{{ opt_value }}"{% if opt_value == entry[name] %} selected{% endif %}>{{ opt_label }}</option>
                                  {% endfor %}
                                </select>
                              {% else %}
                                <input class="form-control form-control-sm" style="max-width: 110px" name="value" type="number" step="any" value="{{ entry[name] }}">
                              {% endif %}
                              <button class="btn btn-sm btn-outline-primary" type="submit">Set</button>
                            </form>
                          {% endif %}
                        {% endfor %}
                        {% if feature.toggle_field %}
                          <form method="post" action="{{ url_for('toggle', key=feature.key, entry_id=entry.id) }}">
                            {{ keep() }}
                            <button class="btn btn-sm btn-outline-secondary" type="submit">{{ feature.toggle_labels[0] if entry[feature.toggle_field] else feature.toggle_labels[1] }}</button>
                          </form>
                        {% endif %}
                        <a class="btn btn-sm btn-outline-secondary" href="{{ url_for('tab', key=feature.key, edit=entry.id, hide_balances=1 if hidden else none) }}">Edit</a>
                        <form method="post" action="{{ url_for('delete', key=feature.key, entry_id=entry.id) }}" onsubmit="return confirm('Delete this entry?');">
                          {{ keep() }}
                          <button class="btn btn-sm btn-outline-danger" type="submit">Delete</button>
                        </form>
                      </div>
                    </td>
                  </tr>
                {% else %}
                  <tr><td colspan="{{ feature.columns|length + 1 }}" class="text-center text-muted">{{ feature.empty_message }}</td></tr>
                {% endfor %}
              </tbody>
            </table>
          </div>
        </div>
      </div>
    </div>
  </div>
</div>

{% if dialog and dialog.is_open %}
  <div class="modal d-block modal-backdrop-lite" id="edit-dialog" tabindex="-1" role="dialog" aria-modal="true">
    <div class="modal-dialog">
      <div class="modal-content">
        <form method="post" action="{{ url_for('edit', key=feature.key, entry_id=dialog_entry_id) }}">
          {{ keep() }}
          <div class="modal-header">
            <h5 class="modal-title">Edit {{ dialog.title }}</h5>
          </div>
          <div class="modal-body">
            <p class="text-muted small">Make changes to your entry. Click save when you're done.</p>
            {% for field, value in dialog.rows() %}
              <div class="row mb-2 align-items-center">
                <label class="col-4 col-form-label text-end" for="edit_{{ field.name }}">{{ field.label }}</label>
                <div class="col-8">{{ input(field, value, 'edit_') }}</div>
              </div>
            {% endfor %}
          </div>
          <div class="modal-footer">
            <a class="btn btn-outline-secondary" href="{{ url_for('tab', key=feature.key, hide_balances=1 if hidden else none) }}">Cancel</a>
            <button class="btn btn-primary" type="submit" onclick="this.disabled=true; this.innerText='Saving...'; this.form.submit();">Save changes</button>
          </div>
        </form>
      </div>
    </div>
  </div>
{% endif %}

<script>
const trend = {{ trend_json | safe }};
if (trend && trend.labels.length) {
  new Chart(document.getElementById('trend_chart'), {
    type: 'line',
    data: { labels: trend.labels, datasets: [{ label: {{ feature.trend_title | tojson }}, data: trend.values, tension: 0.3 }] },
    options: { responsive: true, maintainAspectRatio: false, plugins: { legend: { display: false } } }
  });
}
</script>
<script src="https://cdn.jsdelivr.net/npm/bootstrap@5.3.3/dist/js/bootstrap.bundle.min.js"></script>
</body>
</html>
"""
