from html import escape
from typing import Iterable

PAGE_TEMPLATE = """
<html>
  <body style="font-family: Arial; padding: 20px;">
    <h2>NGAI Backend Tester</h2>
    <textarea id="msg" rows="4" cols="50" placeholder="Type message..."></textarea><br><br>
    <select id="model">
      {options}
    </select>
    <button onclick="send()">Send</button>

    <pre id="out" style="background:#eee; padding:10px; margin-top:20px;"></pre>

<script>
async function send() {{
  document.getElementById("out").innerText = "Loading...";
  const res = await fetch("/chat", {{
    method: "POST",
    headers: {{"Content-Type":"application/json"}},
    body: JSON.stringify({{
      message: document.getElementById("msg").value,
      model: document.getElementById("model").value
    }})
  }});
  const data = await res.json();
  document.getElementById("out").innerText = JSON.stringify(data, null, 2);
}}
</script>

  </body>
</html>
"""


def render_tester_page(model_keys: Iterable[str]) -> str:
    options = "".join(
        f'<option value="{escape(key)}">{escape(key)}</option>' for key in model_keys
    )
    return PAGE_TEMPLATE.format(options=options)
