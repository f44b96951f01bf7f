"""
Notes2Quote — HTML Templates (Jinja2)
Rendered by api/screen.py for the document preview and by the dashboard
for the saved-quotes list.
"""

BASE_CSS = """
:root{--bg:#f3f4f7;--sf:#ffffff;--bd:#d9dce4;--tx:#111;--tx2:#5a5f6e;--ac:#1a5fd0;
--fill:#C3C3E0;--alt:#f5f5fa;--r:8px}
*{margin:0;padding:0;box-sizing:border-box}
body{font-family:-apple-system,'Helvetica Neue',Arial,sans-serif;background:var(--bg);color:var(--tx)}
a{color:var(--ac);text-decoration:none}
.hdr{background:var(--sf);border-bottom:1px solid var(--bd);padding:12px 24px;display:flex;justify-content:space-between;align-items:center}
.hdr h1{font-size:16px;font-weight:600;color:var(--tx2)}
.ctr{max-width:900px;margin:0 auto;padding:20px 24px}
.scroll{max-height:calc(100vh - 70px);overflow-y:auto}
.doc{background:#fff;width:100%;max-width:760px;margin:0 auto;padding:32px;border:1px solid var(--bd);box-shadow:0 2px 10px rgba(0,0,0,.06)}
.blk{margin-bottom:18px}
.doc-hdr{display:flex;justify-content:space-between;align-items:flex-start}
.logo{width:60px;height:60px;border-radius:50%;background:rgba(26,95,208,.2)}
.biz{text-align:right;font-size:12px;color:var(--tx2)}
.biz .name{font-size:20px;font-weight:700;color:var(--tx)}
.rule{border:none;border-top:2px solid #000;margin:12px 0}
.title-row{display:flex;justify-content:space-between;align-items:flex-end}
.title-row h2{font-size:32px;font-weight:800}
.meta{text-align:right;font-size:13px}
.meta .valid{font-style:italic}
h3{font-size:15px;margin-bottom:6px}
.parties .first{font-weight:700}
.jobloc{font-style:italic}
table.tbl{width:100%;border-collapse:collapse;font-size:12px}
.tbl th{background:var(--fill);text-align:right;padding:6px 8px;font-weight:700}
.tbl th:first-child,.tbl td:first-child{text-align:left}
.tbl td{text-align:right;padding:5px 8px;border-bottom:1px solid var(--bd);vertical-align:top}
.tbl td:last-child{font-weight:700}
.tbl tbody tr:nth-child(even){background:var(--alt)}
.totals{margin-left:auto;width:320px;font-size:14px;font-weight:700;border-top:1px solid var(--bd);padding-top:6px}
.totals div{display:flex;justify-content:space-between;padding:3px 0}
.totals .grand{font-size:18px;border-top:1px solid var(--bd);margin-top:4px;padding-top:6px}
.notes p{font-size:12px;white-space:pre-wrap}
.photos .row{display:flex;gap:8px}
.photos img{width:100px;height:100px;object-fit:cover;border:1px solid #888}
.footer{text-align:center;font-size:11px;font-style:italic;color:var(--tx2);margin-top:28px}
.list a{display:block;background:var(--sf);border:1px solid var(--bd);border-radius:var(--r);padding:12px 16px;margin-bottom:8px;color:var(--tx)}
.list .sub{font-size:12px;color:var(--tx2)}
.empty{color:var(--tx2);text-align:center;padding:40px}
"""

# Blocks are written strictly in document order; every string in a block
# appears exactly once so the page text matches the PDF.
PAGE_DOCUMENT = """<!doctype html>
<html><head><meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{{ doc.title }} {{ doc.quote_number }}</title>
<style>{{ css|safe }}</style></head>
<body>
<div class="scroll"><div class="ctr"><div class="doc" id="document">
{% for b in doc.blocks %}
  {% if b.kind == "header" %}
  <section class="blk header">
    <div class="doc-hdr">
      <div class="logo"></div>
      <div class="biz">
        {% for line in b.lines %}<div class="{{ 'name' if loop.first else '' }}">{{ line }}</div>{% endfor %}
      </div>
    </div>
    <hr class="rule">
    <div class="title-row">
      <div><h2>{{ b.heading }}</h2>{% if b.aside %}<div>{{ b.aside[0] }}</div>{% endif %}</div>
      <div class="meta">
        {% for line in b.aside[1:] %}<div class="{{ 'valid' if loop.last else '' }}">{{ line }}</div>{% endfor %}
      </div>
    </div>
  </section>
  {% elif b.kind == "parties" %}
  <section class="blk parties">
    <h3>{{ b.heading }}</h3>
    {% for line in b.lines %}<div class="{{ 'first' if loop.first else '' }}">{{ line }}</div>{% endfor %}
  </section>
  {% elif b.kind == "job_address" %}
  <section class="blk jobloc">{% for line in b.lines %}<div>{{ line }}</div>{% endfor %}</section>
  {% elif b.kind in ("items", "extras") %}
  <section class="blk {{ b.kind }}">
    <h3>{{ b.heading }}</h3>
    <table class="tbl">
      <thead><tr>{% for col in b.columns %}<th>{{ col }}</th>{% endfor %}</tr></thead>
      <tbody>
      {% for row in b.rows %}<tr>{% for cell in row %}<td>{{ cell }}</td>{% endfor %}</tr>
      {% endfor %}
      </tbody>
    </table>
  </section>
  {% elif b.kind == "totals" %}
  <section class="blk totals">
    {% for label, value in b.rows %}
    <div class="{{ 'grand' if loop.last else '' }}"><span>{{ label }}</span><span>{{ value }}</span></div>
    {% endfor %}
  </section>
  {% elif b.kind == "notes" %}
  <section class="blk notes">
    <h3>{{ b.heading }}</h3>
    {% for line in b.lines %}<p>{{ line }}</p>{% endfor %}
  </section>
  {% elif b.kind == "photos" %}
  <section class="blk photos">
    <h3>{{ b.heading }}</h3>
    <div class="row">{% for src in photo_uris %}<img src="{{ src }}" alt="">{% endfor %}</div>
  </section>
  {% elif b.kind == "footer" %}
  <footer class="footer">{% for line in b.lines %}<div>{{ line }}</div>{% endfor %}</footer>
  {% endif %}
{% endfor %}
</div></div></div>
</body></html>
"""

PAGE_LIST = """<!doctype html>
<html><head><meta charset="utf-8"><title>Saved Quotes</title>
<style>{{ css|safe }}</style></head>
<body>
<div class="hdr"><h1>Saved</h1><a href="/api/profile">Profile</a></div>
<div class="ctr list">
{% for q in quotes %}
  <a href="/quotes/{{ q.id }}"><div>{{ q.title }}</div><div class="sub">{{ q.customer.name }} · {{ q.quote_number }}</div></a>
{% else %}
  <div class="empty">No saved quotes</div>
{% endfor %}
</div>
</body></html>
"""
