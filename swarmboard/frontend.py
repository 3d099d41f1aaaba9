import json
import os

from flask import Blueprint, Response, abort, current_app, render_template_string, send_from_directory

from .identity import get_hostname

frontend = Blueprint("frontend", __name__)


def _static_dir():
    return os.path.abspath(current_app.config["SWARMBOARD_SETTINGS"].static_dir)


@frontend.route("/hostname.js")
def hostname_js():
    # json.dumps gives a safely quoted JS string literal
    body = f"window.SERVER_HOSTNAME = {json.dumps(get_hostname())};\n"
    return Response(body, mimetype="application/javascript")


@frontend.route("/", defaults={"path": ""})
@frontend.route("/<path:path>")
def spa(path):
    """Static assets first, then the single-page app for everything else."""
    if path.startswith("api/"):
        abort(404)
    static_dir = _static_dir()
    if path and os.path.isfile(os.path.join(static_dir, path)):
        return send_from_directory(static_dir, path)
    if os.path.isfile(os.path.join(static_dir, "index.html")):
        return send_from_directory(static_dir, "index.html")
    settings = current_app.config["SWARMBOARD_SETTINGS"]
    return render_template_string(
        DASHBOARD_HTML,
        poll_interval_ms=settings.poll_interval_ms,
        production=settings.is_production,
        items_enabled=settings.items_enabled,
    )


# --- UI ---
DASHBOARD_HTML = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Docker Swarm Webapp</title>
    <script src="/hostname.js"></script>
    <style>
        :root { --bg: #f0f2f5; --card: #ffffff; --text: #1a1a1a; --green: #10b981; --red: #ef4444; --blue: #3b82f6; }
        body { font-family: 'Inter', system-ui, sans-serif; background: var(--bg); color: var(--text); margin: 0; padding: 20px; }

        .dashboard { display: grid; grid-template-columns: 2fr 1fr; gap: 20px; max-width: 1200px; margin: 0 auto; }
        .card { background: var(--card); padding: 25px; border-radius: 16px; box-shadow: 0 4px 6px -1px rgba(0,0,0,0.1); }
        .wide { grid-column: 1 / -1; }

        .header-stat { display: flex; align-items: center; justify-content: space-between; margin-bottom: 20px; }
        .live-badge { background: #d1fae5; color: #065f46; padding: 8px 16px; border-radius: 99px; font-weight: 700; display: flex; align-items: center; gap: 8px; }
        .live-badge.dev { background: #eff6ff; color: #1e40af; }
        .dot { height: 12px; width: 12px; background: var(--green); border-radius: 50%; display: inline-block; animation: pulse 2s infinite; }
        .error-banner { background: #fef2f2; color: #991b1b; border: 1px solid #fee2e2; padding: 12px 16px; border-radius: 12px; margin-bottom: 16px; display: none; }

        .info-grid { display: grid; grid-template-columns: repeat(auto-fill, minmax(170px, 1fr)); gap: 12px; }
        .info { background: #f8fafc; border-radius: 12px; padding: 14px; }
        .info h3 { margin: 0 0 6px; font-size: 0.8rem; color: #6b7280; text-transform: uppercase; }
        .info p { margin: 0; font-family: monospace; font-size: 0.95rem; word-break: break-all; }

        .node { background: white; border: 2px solid #e2e8f0; padding: 10px 15px; border-radius: 8px; font-family: monospace; font-size: 0.9rem; display: flex; justify-content: space-between; margin-bottom: 8px; }
        .node.current { border-color: var(--green); box-shadow: 0 0 0 4px #d1fae5; }

        input, textarea { width: 100%; box-sizing: border-box; padding: 10px; border: 1px solid #e2e8f0; border-radius: 8px; margin-bottom: 10px; font: inherit; }
        .btn { padding: 12px 16px; border: none; border-radius: 12px; font-weight: 600; cursor: pointer; background: var(--text); color: white; }
        .btn:disabled { opacity: 0.5; }
        .btn-kill { background: #fef2f2; color: #991b1b; border: 1px solid #fee2e2; padding: 6px 10px; font-size: 0.8rem; }

        .message { border-bottom: 1px solid #eee; padding: 12px 0; }
        .message-meta { color: #666; font-size: 0.8rem; margin-left: 8px; }
        .message-actions { display: flex; justify-content: space-between; align-items: center; }

        @keyframes pulse { 0% { box-shadow: 0 0 0 0 rgba(16, 185, 129, 0.4); } 70% { box-shadow: 0 0 0 10px rgba(16, 185, 129, 0); } 100% { box-shadow: 0 0 0 0 rgba(16, 185, 129, 0); } }
    </style>
</head>
<body>

<div class="dashboard">
    <div class="card wide">
        <div class="header-stat">
            <h2>Docker Swarm Webapp</h2>
            <div class="live-badge {{ '' if production else 'dev' }}">
                <span class="dot"></span>
                {{ 'Production' if production else 'Development' }}
            </div>
        </div>
        <div class="error-banner" id="errorBanner"></div>
        <div class="info-grid" id="serverInfo"></div>
    </div>

    <div class="card">
        <h2>Load Distribution</h2>
        <p style="color: #666; font-size: 0.9rem;">Requests handled by each container in the cluster.</p>
        <div id="containerStats"></div>
    </div>

    <div class="card">
        <h2>Send Message</h2>
        <form id="messageForm">
            <input id="author" type="text" placeholder="Your name (optional)" maxlength="30">
            <textarea id="messageText" rows="3" placeholder="Write your message..." maxlength="500" required></textarea>
            <button class="btn" id="submitBtn" type="submit">Send</button>
        </form>
    </div>

    <div class="card wide">
        <h2>Recent Messages</h2>
        <div id="messages"></div>
    </div>
    {% if items_enabled %}
    <div class="card wide" id="itemsCard">
        <h2>Items</h2>
        <form id="itemForm">
            <input id="itemName" type="text" placeholder="Item name" required>
            <input id="itemDescription" type="text" placeholder="Description">
            <button class="btn" type="submit">Add Item</button>
        </form>
        <div id="items"></div>
    </div>
    {% endif %}
</div>

<script>
    const POLL_INTERVAL_MS = {{ poll_interval_ms | int }};
    const FIELDS = [
        ['hostname', 'Server/Host'], ['containerId', 'Container ID'], ['containerName', 'Container Name'],
        ['nodeName', 'Docker Node'], ['serviceName', 'Service'], ['taskSlot', 'Task Slot'],
        ['platform', 'Platform'], ['requestCount', 'Requests Served'], ['timestamp', 'Last Update'],
    ];
    let serverInfo = {};
    let stats = { container_stats: [], recent_messages: [] };
    let timer = null;

    function el(tag, cls, text) {
        const node = document.createElement(tag);
        if (cls) node.className = cls;
        if (text !== undefined) node.textContent = text;
        return node;
    }

    async function getJSON(url) {
        const res = await fetch(url);
        if (!res.ok) throw new Error(`HTTP error! status: ${res.status}`);
        const type = res.headers.get('content-type') || '';
        if (!type.includes('application/json')) throw new Error('Server returned HTML instead of JSON');
        return res.json();
    }

    function showError(msg) {
        const banner = document.getElementById('errorBanner');
        banner.textContent = msg ? `API Error: ${msg}` : '';
        banner.style.display = msg ? 'block' : 'none';
    }

    function render() {
        const grid = document.getElementById('serverInfo');
        grid.replaceChildren(...FIELDS.map(([key, label]) => {
            const box = el('div', 'info');
            let value = serverInfo[key];
            if (key === 'timestamp' && value) value = new Date(value).toLocaleString();
            box.append(el('h3', null, label), el('p', null, value === undefined ? 'n/a' : String(value)));
            return box;
        }));

        const nodes = document.getElementById('containerStats');
        if (!stats.container_stats.length) {
            nodes.replaceChildren(el('div', 'node', 'Loading container stats...'));
        } else {
            nodes.replaceChildren(...stats.container_stats.map(s => {
                const row = el('div', s.hostname === serverInfo.hostname ? 'node current' : 'node');
                row.append(el('span', null, s.hostname), el('span', null, `${s.request_count} requests`));
                return row;
            }));
        }

        const list = document.getElementById('messages');
        if (!stats.recent_messages.length) {
            list.replaceChildren(el('p', null, 'No messages yet. Be the first!'));
            return;
        }
        list.replaceChildren(...stats.recent_messages.map(m => {
            const item = el('div', 'message');
            const head = el('div', 'message-actions');
            const who = el('div');
            who.append(el('strong', null, m.author), el('span', 'message-meta', `${new Date(m.timestamp).toLocaleString()} via ${m.hostname}`));
            const del = el('button', 'btn btn-kill', 'Delete');
            del.onclick = () => deleteMessage(m.id);
            head.append(who, del);
            item.append(head, el('p', null, m.message));
            return item;
        }));
    }

    async function tick() {
        try {
            const [info, data] = await Promise.all([getJSON('/api/server-info'), getJSON('/api/stats')]);
            serverInfo = info;
            stats = data;
            showError(null);
        } catch (e) {
            showError(e.message);
            serverInfo = {
                hostname: window.SERVER_HOSTNAME || window.location.hostname || 'localhost',
                containerId: 'n/a (API error)',
                timestamp: new Date().toISOString(),
                platform: 'browser',
            };
        }
        render();
    }

    async function deleteMessage(id) {
        if (!window.confirm('Are you sure you want to delete this message?')) return;
        try {
            const res = await fetch(`/api/messages/${id}`, { method: 'DELETE' });
            if (!res.ok) throw new Error(`HTTP error! status: ${res.status}`);
            await tick();
        } catch (e) {
            showError('Failed to delete message: ' + e.message);
        }
    }

    document.getElementById('messageForm').addEventListener('submit', async (ev) => {
        ev.preventDefault();
        const text = document.getElementById('messageText');
        const author = document.getElementById('author');
        if (!text.value.trim()) return;
        const btn = document.getElementById('submitBtn');
        btn.disabled = true;
        try {
            const res = await fetch('/api/messages', {
                method: 'POST',
                headers: { 'Content-Type': 'application/json' },
                body: JSON.stringify({ message: text.value.trim(), author: author.value.trim() || 'Anonymous' }),
            });
            if (!res.ok) throw new Error(`HTTP error! status: ${res.status}`);
            text.value = '';
            author.value = '';
            await tick();
        } catch (e) {
            showError('Failed to submit message: ' + e.message);
        } finally {
            btn.disabled = false;
        }
    });

{% if items_enabled %}
    async function itemsCall(url, options) {
        const res = await fetch(url, options);
        const body = await res.json().catch(() => ({}));
        if (!res.ok) throw new Error(body.message || `HTTP error! status: ${res.status}`);
        return body;
    }

    function itemOptions(method, item) {
        return { method, headers: { 'Content-Type': 'application/json' }, body: JSON.stringify(item) };
    }

    async function loadItems() {
        try {
            const items = await itemsCall('/api/items');
            const list = document.getElementById('items');
            if (!items || !items.length) {
                list.replaceChildren(el('p', null, 'No items yet.'));
                return;
            }
            list.replaceChildren(...items.map(item => {
                const row = el('div', 'message message-actions');
                const text = el('div');
                text.append(el('strong', null, item.name), el('span', 'message-meta', item.description || ''));
                const buttons = el('div');
                const edit = el('button', 'btn btn-kill', 'Edit');
                edit.onclick = () => editItem(item);
                const del = el('button', 'btn btn-kill', 'Delete');
                del.onclick = () => deleteItem(item.id);
                buttons.append(edit, del);
                row.append(text, buttons);
                return row;
            }));
        } catch (e) {
            showError('Failed to load items: ' + e.message);
        }
    }

    async function editItem(item) {
        const name = window.prompt('Item name', item.name);
        if (name === null || !name.trim()) return;
        const description = window.prompt('Description', item.description || '');
        try {
            await itemsCall(`/api/items/${encodeURIComponent(item.id)}`,
                itemOptions('PUT', { name: name.trim(), description: (description || '').trim() }));
            await loadItems();
        } catch (e) {
            showError('Failed to update item: ' + e.message);
        }
    }

    async function deleteItem(id) {
        if (!window.confirm('Are you sure you want to delete this item?')) return;
        try {
            await itemsCall(`/api/items/${encodeURIComponent(id)}`, { method: 'DELETE' });
            await loadItems();
        } catch (e) {
            showError('Failed to delete item: ' + e.message);
        }
    }

    document.getElementById('itemForm').addEventListener('submit', async (ev) => {
        ev.preventDefault();
        const name = document.getElementById('itemName');
        const description = document.getElementById('itemDescription');
        if (!name.value.trim()) return;
        try {
            await itemsCall('/api/items', itemOptions('POST', { name: name.value.trim(), description: description.value.trim() }));
            name.value = '';
            description.value = '';
            await loadItems();
        } catch (e) {
            showError('Failed to create item: ' + e.message);
        }
    });

    loadItems();
{% endif %}

    tick();
    timer = setInterval(tick, POLL_INTERVAL_MS);
    window.addEventListener('pagehide', () => clearInterval(timer));
</script>
</body>
</html>
"""
