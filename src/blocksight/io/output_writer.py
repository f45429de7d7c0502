from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping, Optional, Tuple

from blocksight.config import settings
from blocksight.core.models import Graph
from blocksight.io.schemas import graph_to_dict


def write_graph_json(
    graph: Graph,
    out_dir: str,
    positions: Optional[Mapping[str, Tuple[float, float]]] = None,
    label: Optional[str] = None,
    filename: str = "graph.json",
) -> str:
    p = Path(out_dir)
    p.mkdir(parents=True, exist_ok=True)

    data = graph_to_dict(graph, positions)
    data["label"] = label or ""
    data["width"] = settings.CANVAS_WIDTH
    data["height"] = settings.CANVAS_HEIGHT

    out_path = p / filename
    with out_path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)

    return str(out_path)


def write_graph_svg(frame: str, out_dir: str, filename: str = "graph.svg") -> str:
    p = Path(out_dir)
    p.mkdir(parents=True, exist_ok=True)

    out_path = p / filename
    with out_path.open("w", encoding="utf-8") as f:
        f.write(frame)

    return str(out_path)


def write_graph_html(out_dir: str, filename: str = "index.html") -> str:
    p = Path(out_dir)
    p.mkdir(parents=True, exist_ok=True)

    out_path = p / filename

    lo, hi = settings.ZOOM_SCALE_EXTENT
    html = (
        _HTML
        .replace("__SCALE_MIN__", str(lo))
        .replace("__SCALE_MAX__", str(hi))
        .replace("__PANEL_MAX__", str(settings.PANEL_MAX_ENTRIES))
        .replace("__EXPLORER__", settings.EXPLORER_BASE_URL.rstrip("/"))
    )

    with out_path.open("w", encoding="utf-8") as f:
        f.write(html)

    return str(out_path)


_HTML = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>Block Sight</title>
  <style>
    body {
      margin: 0;
      font-family: "SF Mono", "Menlo", "Consolas", monospace;
      background: #fff;
      color: #222;
    }
    header {
      padding: 12px 20px;
      border-bottom: 1px solid #ddd;
      background: #f3f4f6;
    }
    header h1 {
      margin: 0;
      font-size: 18px;
      color: #2563eb;
    }
    #wrap {
      display: grid;
      grid-template-columns: 1fr 300px;
      height: calc(100vh - 50px);
    }
    #graph {
      width: 100%;
      height: 100%;
    }
    #panel {
      padding: 12px;
      border-left: 1px solid #ddd;
      overflow-y: auto;
      font-size: 12px;
    }
    #panel h2 {
      font-size: 13px;
      margin: 12px 0 6px 0;
      text-transform: uppercase;
      color: #666;
    }
    #panel a {
      color: #2563eb;
      text-decoration: none;
    }
    .legend span {
      display: inline-block;
      width: 10px;
      height: 10px;
      margin-right: 6px;
      border-radius: 5px;
    }
  </style>
</head>
<body>
  <header><h1 id="label">Block Number: N/A</h1></header>
  <div id="wrap">
    <svg id="graph"></svg>
    <div id="panel">
      <div class="legend"><span style="background: blue;"></span>From Address</div>
      <div class="legend"><span style="background: green;"></span>To Address</div>
      <div id="selection">Click a node to list its transactions.</div>
    </div>
  </div>

  <script src="https://unpkg.com/d3@7/dist/d3.min.js"></script>
  <script>
    const PANEL_MAX = __PANEL_MAX__;
    const EXPLORER = "__EXPLORER__";
    const short = (v) => (v && v.startsWith("0x") ? v.slice(0, 6) : (v || "").slice(0, 4));

    function renderPanel(id, links) {
      const outgoing = links.filter((l) => l.source.id === id).slice(0, PANEL_MAX);
      const incoming = links.filter((l) => l.target.id === id).slice(0, PANEL_MAX);
      const row = (addr, hash) =>
        `<div><a href="${EXPLORER}/address/${addr}" target="_blank">${short(addr)}</a>` +
        (hash ? ` · <a href="${EXPLORER}/tx/${hash}" target="_blank">${short(hash)}</a>` : "") +
        `</div>`;
      document.getElementById("selection").innerHTML =
        `<h2>${short(id)}</h2>` +
        `<h2>Outgoing (${outgoing.length})</h2>` + outgoing.map((l) => row(l.target.id, l.hash)).join("") +
        `<h2>Incoming (${incoming.length})</h2>` + incoming.map((l) => row(l.source.id, l.hash)).join("");
    }

    fetch("./graph.json")
      .then((r) => r.json())
      .then((data) => {
        document.getElementById("label").textContent = data.label || "";
        const svg = d3.select("#graph");
        const width = svg.node().clientWidth || data.width;
        const height = svg.node().clientHeight || data.height;
        if (!data.nodes.length) {
          svg.append("text").attr("x", width / 2).attr("y", height / 2)
            .attr("text-anchor", "middle").style("fill", "#888")
            .text("No transaction nodes to display.");
          return;
        }

        const nodes = data.nodes.map((n) => ({ ...n }));
        const links = data.links.map((l) => ({ ...l }));
        const root = svg.append("g");
        svg.call(d3.zoom().scaleExtent([__SCALE_MIN__, __SCALE_MAX__])
          .on("zoom", (event) => root.attr("transform", event.transform)));

        const link = root.append("g").selectAll("line").data(links).enter().append("line")
          .attr("stroke", "#999").attr("stroke-opacity", 0.6).attr("stroke-width", 1);
        const node = root.append("g").selectAll("circle").data(nodes).enter().append("circle")
          .attr("r", 6).attr("fill", (d) => (d.role === "from" ? "blue" : "green"))
          .attr("stroke-width", 1.5);
        node.append("title").text((d) => `Address: ${d.id}`);

        const simulation = d3.forceSimulation(nodes)
          .force("link", d3.forceLink(links).id((d) => d.id))
          .force("charge", d3.forceManyBody())
          .force("x", d3.forceX(width / 2).strength(0.1))
          .force("y", d3.forceY(height / 2).strength(0.1))
          .alpha(0.05);

        node.call(d3.drag()
          .on("start", (event, d) => {
            if (!event.active) simulation.alphaTarget(0.3).restart();
            d.fx = d.x; d.fy = d.y;
          })
          .on("drag", (event, d) => { d.fx = event.x; d.fy = event.y; })
          .on("end", (event, d) => {
            if (!event.active) simulation.alphaTarget(0);
            d.fx = null; d.fy = null;
          }));
        node.on("click", (_, d) => renderPanel(d.id, links));

        simulation.on("tick", () => {
          link.attr("x1", (d) => d.source.x).attr("y1", (d) => d.source.y)
            .attr("x2", (d) => d.target.x).attr("y2", (d) => d.target.y);
          node.attr("cx", (d) => d.x).attr("cy", (d) => d.y);
        });
      })
      .catch((err) => {
        document.getElementById("selection").textContent = "Failed to load graph.json";
        alert(`Error loading graph.json: ${err.message}`);
      });
  </script>
</body>
</html>
"""
