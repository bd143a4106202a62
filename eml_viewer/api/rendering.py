"""
eml_viewer/api/rendering.py
---------------------------
HTML for the browser viewer: header details, text/HTML tabs and
attachment download links.
"""

from html import escape

from eml_viewer.store.memory_store import StoredEmail

_SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]

# /download is behind the bearer token; plain browser clicks get a 401.
DOWNLOAD_NOTE = "Downloads require the API token (Authorization: Bearer &lt;token&gt;)."

_STYLE = """
    * { margin: 0; padding: 0; box-sizing: border-box; }
    body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
           background: #f1f3f4; color: #1a1a1a; line-height: 1.6; }
    .container { max-width: 800px; margin: 0 auto; background: #fff; min-height: 100vh;
                 box-shadow: 0 0 20px rgba(0,0,0,0.1); }
    .header-toggle { padding: 1rem 2rem; cursor: pointer; display: flex;
                     justify-content: space-between; border-bottom: 2px solid #e1e5e9; }
    .header-content { padding: 2rem; display: none; }
    .email-field { display: flex; gap: 1rem; margin-bottom: 1rem; }
    .email-field label { font-weight: 600; color: #5f6368; min-width: 80px;
                         text-transform: uppercase; font-size: 0.9rem; }
    .attachments-list { display: flex; flex-direction: column; gap: 0.25rem; }
    .attachment-link { color: #1a73e8; text-decoration: none; }
    .attachment-note { color: #5f6368; font-size: 0.8rem; font-style: italic; }
    .content-tabs { display: flex; border-bottom: 2px solid #e1e5e9; }
    .tab-btn { background: none; border: none; padding: 1rem 2rem; font-weight: 600;
               color: #5f6368; cursor: pointer; text-transform: uppercase; }
    .tab-btn.active { color: #1a73e8; border-bottom: 2px solid #1a73e8; }
    .content-panel { display: none; padding: 1.5rem; }
    .content-panel.active { display: block; }
    .content-panel pre { white-space: pre-wrap; word-wrap: break-word; background: #f8f9fa;
                         padding: 1.5rem; border-radius: 6px; border: 1px solid #e1e5e9; }
    .no-content { color: #5f6368; font-style: italic; text-align: center; padding: 3rem; }
    iframe { width: 90%; max-width: 700px; height: 800px; border: 1px solid #e1e5e9;
             border-radius: 8px; margin: 0 auto; display: block; }
"""

_SCRIPT = """
    function showTab(name, btn) {
        document.querySelectorAll('.content-panel').forEach(p => p.classList.remove('active'));
        document.querySelectorAll('.tab-btn').forEach(b => b.classList.remove('active'));
        document.getElementById(name + 'Content').classList.add('active');
        btn.classList.add('active');
    }
    function toggleHeader() {
        const content = document.getElementById('headerContent');
        const icon = document.getElementById('toggleIcon');
        const hidden = content.style.display !== 'block';
        content.style.display = hidden ? 'block' : 'none';
        icon.textContent = hidden ? '\\u25B2' : '\\u25BC';
    }
"""


def format_file_size(size: int) -> str:
    """1536 -> '1.5 KB'"""
    if size <= 0:
        return "0 Bytes"
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[unit]}"


def _field(label: str, value_html: str) -> str:
    return f'<div class="email-field"><label>{label}</label><span>{value_html}</span></div>'


def render_email_page(entry: StoredEmail) -> str:
    msg = entry.message

    links = "".join(
        f'<a class="attachment-link" href="/download/{escape(entry.id)}/{i}">'
        f"{escape(a.filename)} ({format_file_size(a.size)})</a>"
        for i, a in enumerate(msg.attachments)
    )
    attachments = (
        f'<div class="email-field"><label>Attachments</label>'
        f'<div class="attachments-list">{links}'
        f'<p class="attachment-note">{DOWNLOAD_NOTE}</p></div></div>'
        if msg.attachments
        else ""
    )

    text_panel = (
        f"<pre>{escape(msg.text)}</pre>"
        if msg.text
        else '<p class="no-content">No text content available</p>'
    )
    # sandboxed: scripts in the message never run
    html_panel = (
        f'<iframe srcdoc="{escape(msg.html)}" sandbox="allow-same-origin"></iframe>'
        if msg.html
        else '<p class="no-content">No HTML content available</p>'
    )

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{escape(msg.subject)}</title>
<style>{_STYLE}</style>
</head>
<body>
<div class="container">
  <div class="email-header">
    <div class="header-toggle" onclick="toggleHeader()">
      <span class="header-title">Email Details</span>
      <span class="toggle-icon" id="toggleIcon">&#9660;</span>
    </div>
    <div class="header-content" id="headerContent">
      {_field("From", escape(msg.from_))}
      {_field("To", escape(", ".join(msg.to)))}
      {_field("Subject", escape(msg.subject))}
      {_field("Date", escape(msg.date.strftime("%a, %d %b %Y %H:%M:%S %z")))}
      {attachments}
    </div>
  </div>
  <div class="content-tabs">
    <button class="tab-btn active" onclick="showTab('text', this)">Text</button>
    <button class="tab-btn" onclick="showTab('html', this)">HTML</button>
  </div>
  <div class="content-area">
    <div id="textContent" class="content-panel active">{text_panel}</div>
    <div id="htmlContent" class="content-panel">{html_panel}</div>
  </div>
</div>
<script>{_SCRIPT}</script>
</body>
</html>"""


def render_not_found() -> str:
    return """<!DOCTYPE html>
<html>
<head><title>Email Not Found</title></head>
<body>
  <h1>Email Not Found</h1>
  <p>The requested email could not be found or may have expired.</p>
</body>
</html>"""
