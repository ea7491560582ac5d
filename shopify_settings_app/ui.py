"""Embedded admin page: pick a product and show the current selection."""

import json
from html import escape
from string import Template
from typing import Callable

from fastapi.responses import HTMLResponse

from .config import AppConfig

PageRenderer = Callable[[AppConfig, str], HTMLResponse]

_INDEX_TEMPLATE = Template("""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="shopify-api-key" content="$api_key">
  <title>App settings</title>
  <script src="https://cdn.shopify.com/shopifycloud/app-bridge.js"></script>
  <style>
    body { font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif; margin: 2rem; }
    .card { border: 1px solid #e1e3e5; border-radius: 8px; padding: 1rem; max-width: 32rem; }
    .product { display: flex; align-items: center; gap: 1rem; }
    .product img { width: 40px; height: 40px; object-fit: cover; }
  </style>
</head>
<body>
  <h2>App settings</h2>
  <p>Set up the product you want to add to each customer's first order.</p>
  <div class="card" id="settings">Loading...</div>
  <script>
    var SHOP = $shop_json;
    var container = document.getElementById("settings");

    function authHeaders() {
      return shopify.idToken().then(function (token) {
        return { Authorization: "Bearer " + token };
      });
    }

    function render(product) {
      container.innerHTML = "";
      var button = document.createElement("button");
      if (product) {
        var row = document.createElement("div");
        row.className = "product";
        var img = document.createElement("img");
        img.src = (product.image && product.image.src) || "";
        img.alt = "Product " + product.title + " thumbnail";
        var title = document.createElement("strong");
        title.textContent = product.title;
        row.appendChild(img);
        row.appendChild(title);
        container.appendChild(row);
        button.textContent = "Select new product";
      } else {
        var empty = document.createElement("p");
        empty.textContent = "You have not selected any product yet.";
        container.appendChild(empty);
        button.textContent = "Select product";
      }
      button.onclick = pickProduct;
      container.appendChild(button);
    }

    function readSettings(res) {
      if (!res.ok) {
        throw new Error("Settings request failed (" + res.status + ")");
      }
      return res.json().then(function (body) {
        if (body.status === "EMPTY_SETTINGS") {
          return null;
        }
        if (body.status === "OK_SETTINGS") {
          return body.data;
        }
        throw new Error("Unknown settings status");
      });
    }

    function showError(err) {
      shopify.toast.show(err.message, { isError: true });
    }

    function getSettings() {
      return authHeaders()
        .then(function (headers) { return fetch("/settings", { headers: headers }); })
        .then(readSettings)
        .then(render)
        .catch(function (err) { render(null); showError(err); });
    }

    function setSettings(productId) {
      return authHeaders()
        .then(function (headers) {
          headers["Content-type"] = "text/plain";
          return fetch("/settings", {
            method: "POST",
            headers: headers,
            body: JSON.stringify({ productId: productId })
          });
        })
        .then(readSettings)
        .then(function (product) {
          render(product);
          shopify.toast.show("Settings updated");
        })
        .catch(showError);
    }

    function pickProduct() {
      shopify.resourcePicker({ type: "product", action: "select", multiple: false })
        .then(function (selection) {
          if (!selection || selection.length === 0) {
            return;
          }
          return setSettings(selection[0].id);
        });
    }

    getSettings();
  </script>
</body>
</html>
""")


def render_index(config: AppConfig, shop: str) -> HTMLResponse:
    """Render the embedded settings page for a shop."""
    page = _INDEX_TEMPLATE.substitute(
        api_key=escape(config.shopify.api_key, quote=True),
        shop_json=json.dumps(shop).replace("<", "\\u003c"),
    )
    return HTMLResponse(page)
