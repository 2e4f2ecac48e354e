# api/json_translator/ui.py
# ブラウザ UI（1 ページ）。JSON API の純粋なクライアントで、サーバ側の状態は持たない。
# 進捗バーは見た目だけの推定値。完了の判定は常に HTTP レスポンス。

INDEX_HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>JSON Translator</title>
  <script src="https://cdn.tailwindcss.com"></script>
  <style>
    .drop-zone { border: 2px dashed #cbd5e0; transition: all 0.3s ease; }
    .drop-zone.dragover { border-color: #4299e1; background-color: #ebf8ff; }
    .json-editor { font-family: 'Courier New', monospace; }
  </style>
</head>
<body class="bg-gray-50 min-h-screen">
<div class="container mx-auto px-4 py-8 max-w-6xl">
  <div class="text-center mb-8">
    <h1 class="text-4xl font-bold text-gray-900 mb-2">JSON Document Translator</h1>
    <p class="text-gray-600">Translate whole JSON files while keeping their structure</p>
  </div>

  <div class="grid grid-cols-1 lg:grid-cols-2 gap-8">
    <div class="space-y-6">
      <div class="bg-white rounded-lg shadow p-6">
        <h2 class="text-xl font-semibold mb-4">Load JSON</h2>
        <div id="drop-zone" class="drop-zone rounded-lg p-8 text-center cursor-pointer">
          <p class="text-gray-600 mb-2">Drop a .json file here</p>
          <input type="file" id="file-input" accept=".json" class="hidden">
          <button id="pick-btn" class="bg-blue-500 text-white px-4 py-2 rounded">Choose file</button>
        </div>
        <label class="block text-sm font-medium text-gray-700 mt-4 mb-2">Or paste JSON:</label>
        <textarea id="json-input" class="json-editor w-full h-32 p-3 border rounded-lg"
                  placeholder='{"greeting": "Hello World"}'></textarea>
      </div>

      <div class="bg-white rounded-lg shadow p-6">
        <h2 class="text-xl font-semibold mb-4">Languages</h2>
        <div class="grid grid-cols-1 md:grid-cols-2 gap-4">
          <select id="source-lang" class="w-full p-3 border rounded-lg">
            <option value="auto">Detect automatically</option>
          </select>
          <select id="target-lang" class="w-full p-3 border rounded-lg">
            <option value="">Target language...</option>
          </select>
        </div>
        <p class="text-xs text-gray-500 mt-2">Up to __MAX_KEYS__ string values per document; the first __MAX_TRANSLATED__ are translated.</p>
        <button id="translate-btn" class="w-full mt-4 bg-green-500 text-white py-3 rounded-lg font-semibold disabled:opacity-50">
          Translate JSON
        </button>
      </div>
    </div>

    <div class="space-y-6">
      <div id="progress-panel" class="bg-white rounded-lg shadow p-6 hidden">
        <div class="flex justify-between text-sm text-gray-600 mb-2">
          <span>Processing...</span><span id="progress-text">0%</span>
        </div>
        <div class="w-full bg-gray-200 rounded-full h-2">
          <div id="progress-bar" class="bg-blue-500 h-2 rounded-full" style="width: 0%"></div>
        </div>
      </div>

      <div id="stats-panel" class="bg-white rounded-lg shadow p-6 hidden">
        <h2 class="text-xl font-semibold mb-4">Statistics</h2>
        <div class="grid grid-cols-2 gap-4 mb-4 text-center">
          <div class="bg-green-50 p-3 rounded-lg"><div class="text-2xl font-bold" id="translated-count">0</div>Translated</div>
          <div class="bg-red-50 p-3 rounded-lg"><div class="text-2xl font-bold" id="failed-count">0</div>Failed</div>
          <div class="bg-yellow-50 p-3 rounded-lg"><div class="text-2xl font-bold" id="skipped-count">0</div>Skipped</div>
          <div class="bg-blue-50 p-3 rounded-lg"><div class="text-2xl font-bold" id="total-time">0ms</div>Total time</div>
          <div class="bg-purple-50 p-3 rounded-lg col-span-2"><div class="text-2xl font-bold" id="avg-time">0ms</div>Average per key</div>
        </div>
        <div class="w-full bg-gray-200 rounded-full h-3">
          <div id="success-rate-bar" class="bg-green-500 h-3 rounded-full" style="width: 0%"></div>
        </div>
        <div class="text-right text-sm text-gray-600 mt-1" id="success-rate-text">0%</div>
        <p id="warning-text" class="text-sm text-yellow-700 mt-2 hidden"></p>
      </div>

      <div id="result-panel" class="bg-white rounded-lg shadow p-6 hidden">
        <div class="flex justify-between items-center mb-4">
          <h2 class="text-xl font-semibold">Translated JSON</h2>
          <button id="download-btn" class="bg-blue-500 text-white px-4 py-2 rounded">Download</button>
        </div>
        <textarea id="result-json" class="json-editor w-full h-64 p-3 border rounded-lg bg-gray-50" readonly></textarea>
      </div>

      <div class="bg-white rounded-lg shadow p-6">
        <div class="flex justify-between items-center mb-4">
          <h2 class="text-xl font-semibold">History</h2>
          <button id="refresh-history-btn" class="bg-gray-500 text-white px-3 py-1 rounded text-sm">Refresh</button>
        </div>
        <div id="history-list" class="space-y-2"></div>
      </div>
    </div>
  </div>
</div>

<div id="detail-modal" class="fixed inset-0 bg-black bg-opacity-50 hidden flex items-center justify-center p-4">
  <div class="bg-white rounded-lg shadow-lg max-w-3xl w-full max-h-screen overflow-y-auto p-6">
    <div class="flex justify-between items-center mb-4">
      <h2 class="text-xl font-semibold" id="detail-title">Translation details</h2>
      <button id="detail-close-btn" class="text-gray-500 text-2xl leading-none">&times;</button>
    </div>
    <div class="grid grid-cols-2 md:grid-cols-4 gap-4 mb-4 text-center">
      <div class="bg-blue-50 p-3 rounded-lg"><div class="text-2xl font-bold" id="detail-total">0</div>Total</div>
      <div class="bg-green-50 p-3 rounded-lg"><div class="text-2xl font-bold" id="detail-translated">0</div>Succeeded</div>
      <div class="bg-red-50 p-3 rounded-lg"><div class="text-2xl font-bold" id="detail-failed">0</div>Failed</div>
      <div class="bg-purple-50 p-3 rounded-lg"><div class="text-2xl font-bold" id="detail-rate">0%</div>Success rate</div>
    </div>
    <div id="detail-list" class="space-y-2"></div>
  </div>
</div>

<script>
  const API = "__API_PREFIX__";
  let currentTranslation = null;
  let progressTimer = null;

  document.addEventListener("DOMContentLoaded", () => {
    loadLanguages();
    loadHistory();
    const dropZone = document.getElementById("drop-zone");
    const fileInput = document.getElementById("file-input");
    document.getElementById("pick-btn").addEventListener("click", () => fileInput.click());
    dropZone.addEventListener("dragover", (e) => { e.preventDefault(); dropZone.classList.add("dragover"); });
    dropZone.addEventListener("dragleave", () => dropZone.classList.remove("dragover"));
    dropZone.addEventListener("drop", (e) => {
      e.preventDefault();
      dropZone.classList.remove("dragover");
      if (e.dataTransfer.files.length > 0) readFile(e.dataTransfer.files[0]);
    });
    fileInput.addEventListener("change", (e) => { if (e.target.files.length > 0) readFile(e.target.files[0]); });
    document.getElementById("translate-btn").addEventListener("click", translateJSON);
    document.getElementById("download-btn").addEventListener("click", download);
    document.getElementById("refresh-history-btn").addEventListener("click", loadHistory);
    document.getElementById("detail-close-btn").addEventListener("click", closeDetails);
    document.getElementById("detail-modal").addEventListener("click", (e) => { if (e.target.id === "detail-modal") closeDetails(); });
  });

  async function getJSON(url, options) {
    const res = await fetch(url, options);
    const body = await res.json();
    if (!res.ok) {
      const msg = body.message || "Request failed";
      throw new Error(body.suggestion ? msg + " " + body.suggestion : msg);
    }
    return body;
  }

  async function loadLanguages() {
    const data = await getJSON(API + "/languages");
    const src = document.getElementById("source-lang");
    const tgt = document.getElementById("target-lang");
    data.languages.forEach((lang) => {
      src.appendChild(new Option(lang.name, lang.code));
      tgt.appendChild(new Option(lang.name, lang.code));
    });
  }

  function readFile(file) {
    if (file.type !== "application/json" && !file.name.endsWith(".json")) {
      alert("Please choose a .json file.");
      return;
    }
    const reader = new FileReader();
    reader.onload = (e) => {
      try {
        JSON.parse(e.target.result);
        document.getElementById("json-input").value = e.target.result;
      } catch (err) {
        alert("The file does not contain valid JSON.");
      }
    };
    reader.readAsText(file);
  }

  async function translateJSON() {
    const jsonInput = document.getElementById("json-input").value;
    const targetLang = document.getElementById("target-lang").value;
    if (!jsonInput.trim()) { alert("Paste or load a JSON document first."); return; }
    if (!targetLang) { alert("Choose a target language."); return; }
    try { JSON.parse(jsonInput); } catch (err) { alert("The JSON is not valid."); return; }

    showProgress();
    try {
      currentTranslation = await getJSON(API + "/translate", {
        method: "POST",
        headers: {"Content-Type": "application/json"},
        body: JSON.stringify({
          jsonData: jsonInput,
          sourceLang: document.getElementById("source-lang").value || "auto",
          targetLang: targetLang,
        }),
      });
      showResults(currentTranslation);
      loadHistory();
    } catch (err) {
      alert("Translation error: " + err.message);
    } finally {
      hideProgress();
    }
  }

  function showProgress() {
    document.getElementById("progress-panel").classList.remove("hidden");
    document.getElementById("translate-btn").disabled = true;
    let progress = 0;
    progressTimer = setInterval(() => {
      progress = Math.min(90, progress + Math.random() * 15);
      document.getElementById("progress-bar").style.width = progress + "%";
      document.getElementById("progress-text").textContent = Math.round(progress) + "%";
    }, 500);
  }

  function hideProgress() {
    clearInterval(progressTimer);
    document.getElementById("progress-bar").style.width = "100%";
    document.getElementById("progress-text").textContent = "100%";
    setTimeout(() => {
      document.getElementById("progress-panel").classList.add("hidden");
      document.getElementById("translate-btn").disabled = false;
    }, 500);
  }

  function showResults(data) {
    const s = data.statistics;
    document.getElementById("translated-count").textContent = s.translatedKeys;
    document.getElementById("failed-count").textContent = s.failedKeys;
    document.getElementById("skipped-count").textContent = s.skippedKeys;
    document.getElementById("total-time").textContent = s.processingTimeMs + "ms";
    document.getElementById("avg-time").textContent = Math.round(s.averageTimePerKey) + "ms";
    const rate = s.totalKeys > 0 ? (s.translatedKeys / s.totalKeys * 100) : 0;
    document.getElementById("success-rate-bar").style.width = rate + "%";
    document.getElementById("success-rate-text").textContent = Math.round(rate) + "%";
    const warning = document.getElementById("warning-text");
    warning.textContent = data.warning || "";
    warning.classList.toggle("hidden", !data.warning);
    document.getElementById("result-json").value = JSON.stringify(data.translatedJson, null, 2);
    document.getElementById("stats-panel").classList.remove("hidden");
    document.getElementById("result-panel").classList.remove("hidden");
  }

  function download() {
    if (!currentTranslation) return;
    const blob = new Blob([JSON.stringify(currentTranslation.translatedJson, null, 2)], {type: "application/json"});
    const a = document.createElement("a");
    a.href = URL.createObjectURL(blob);
    a.download = "translated.json";
    document.body.appendChild(a);
    a.click();
    document.body.removeChild(a);
  }

  async function loadHistory() {
    const list = document.getElementById("history-list");
    try {
      const data = await getJSON(API + "/translations");
      if (data.translations.length === 0) {
        list.innerHTML = '<p class="text-gray-500 text-center py-4">No translations yet</p>';
        return;
      }
      list.innerHTML = "";
      data.translations.forEach((t) => {
        const row = document.createElement("div");
        row.className = "border rounded-lg p-3 text-sm cursor-pointer hover:bg-gray-50";
        row.textContent = `#${t.id} ${t.source_language} → ${t.target_language} · ${t.translated_keys}/${t.total_keys} keys · ${t.processing_time_ms}ms · ${t.status}`;
        row.addEventListener("click", () => viewTranslationDetails(t.id));
        list.appendChild(row);
      });
    } catch (err) {
      list.innerHTML = '<p class="text-red-500 text-center py-4">Could not load history</p>';
    }
  }

  async function viewTranslationDetails(id) {
    let data;
    try {
      data = await getJSON(API + "/translations/" + id + "/stats");
    } catch (err) {
      alert("Could not load details: " + err.message);
      return;
    }
    const s = data.summary;
    document.getElementById("detail-title").textContent = "Translation #" + id;
    document.getElementById("detail-total").textContent = s.totalKeys;
    document.getElementById("detail-translated").textContent = s.translatedKeys;
    document.getElementById("detail-failed").textContent = s.failedKeys;
    document.getElementById("detail-rate").textContent = s.successRate + "%";
    const list = document.getElementById("detail-list");
    list.replaceChildren();
    data.details.forEach((d) => {
      const row = document.createElement("div");
      row.className = "border rounded-lg p-3 text-sm";
      const head = document.createElement("div");
      head.className = "flex justify-between font-mono";
      const key = document.createElement("span");
      key.textContent = d.json_key;
      const status = document.createElement("span");
      status.textContent = d.status;
      status.className = d.status === "success" ? "text-green-600" : d.status === "failed" ? "text-red-600" : "text-yellow-600";
      head.append(key, status);
      const original = document.createElement("div");
      original.className = "text-gray-600 mt-1";
      original.textContent = d.original_value;
      row.append(head, original);
      if (d.translated_value !== null) {
        const translated = document.createElement("div");
        translated.className = "text-gray-900 mt-1";
        translated.textContent = d.translated_value;
        row.appendChild(translated);
      }
      if (d.error_message) {
        const error = document.createElement("div");
        error.className = "text-red-500 mt-1";
        error.textContent = d.error_message;
        row.appendChild(error);
      }
      list.appendChild(row);
    });
    document.getElementById("detail-modal").classList.remove("hidden");
  }

  function closeDetails() {
    document.getElementById("detail-modal").classList.add("hidden");
  }
</script>
</body>
</html>
"""


def render_index(api_prefix: str, max_keys: int, max_translated: int) -> str:
    return (
        INDEX_HTML_TEMPLATE
        .replace("__API_PREFIX__", api_prefix.rstrip("/"))
        .replace("__MAX_KEYS__", str(max_keys))
        .replace("__MAX_TRANSLATED__", str(max_translated))
    )
