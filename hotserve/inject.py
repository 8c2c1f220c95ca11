HEAD_TAG = "<head>"

RELOAD_JS = """<script>
(function(){
  if (window.__HOTSERVE__) return;
  window.__HOTSERVE__ = true;
  const ws = new WebSocket(`ws://${location.hostname || "localhost"}:%(port)d`);
  ws.onmessage = (event) => {
    if (event.data === "reload") location.reload();
  };
})();
</script>"""


def reload_script(port):
    return RELOAD_JS % {"port": port}


def inject_reload_script(html, port):
    """Insert the reload client right after the first ``<head>``.

    Documents without a ``<head>`` tag are returned untouched.
    """
    index = html.find(HEAD_TAG)
    if index == -1:
        return html
    cut = index + len(HEAD_TAG)
    return html[:cut] + reload_script(port) + html[cut:]
