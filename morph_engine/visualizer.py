"""
visualizer.py - 자손 예측 결과 차트
확률 내림차순 가로 막대 그래프 (발현/비발현 색 구분)
"""

import io
import base64
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from matplotlib.patches import Patch

from .models import PredictionResult
from .table import PredictionTableGenerator


# ============================================================
# 설정값
# ============================================================
@dataclass
class ChartConfig:
    # 캔버스
    fig_width: float = 10.0
    row_height: float = 0.45     # 막대 한 줄 높이
    min_height: float = 2.5

    bar_height: float = 0.6
    dpi: int = 150

    # 색상 팔레트
    color_visual: str = '#2E7D32'
    color_carrier: str = '#B0BEC5'
    edge_color: str = 'black'

    font_size_label: int = 10
    font_size_title: int = 13

    # 너무 많은 결과는 상위 N개만 표시
    max_rows: int = 40


class PredictionVisualizer:
    def __init__(self, config: Optional[ChartConfig] = None):
        self.config = config or ChartConfig()
        self.table_generator = PredictionTableGenerator()

    def draw(
        self,
        predictions: List[PredictionResult],
        title: str = "",
        hide_common: bool = True,
        save_path: Optional[str] = None
    ) -> str:
        cfg = self.config
        table = self.table_generator.generate_table(predictions, hide_common=hide_common)
        rows = table.rows[:cfg.max_rows]

        height = max(cfg.min_height, cfg.row_height * len(rows) + 1.5)
        fig, ax = plt.subplots(figsize=(cfg.fig_width, height))

        if rows:
            y = np.arange(len(rows))
            values = np.array([r.probability for r in rows])
            colors = [cfg.color_visual if r.is_visual else cfg.color_carrier for r in rows]

            ax.barh(y, values, height=cfg.bar_height, color=colors,
                    edgecolor=cfg.edge_color, linewidth=0.6)
            ax.set_yticks(y)
            ax.set_yticklabels([r.morph for r in rows], fontsize=cfg.font_size_label)
            ax.invert_yaxis()  # 확률 높은 결과가 위

            for yi, v in zip(y, values):
                ax.text(v + 0.5, yi, f"{v:.2f}%", va='center', fontsize=cfg.font_size_label)

            ax.set_xlim(0, min(100.0, float(values.max()) * 1.15 + 5))
        else:
            ax.text(0.5, 0.5, "No predictions", ha='center', va='center',
                    transform=ax.transAxes)
            ax.set_yticks([])

        ax.set_xlabel("Probability (%)")
        ax.spines['top'].set_visible(False)
        ax.spines['right'].set_visible(False)

        heading = title or table.title
        if table.common_traits:
            heading += f"\nAll offspring: {', '.join(table.common_traits)}"
        ax.set_title(heading, fontsize=cfg.font_size_title)

        ax.legend(
            handles=[
                Patch(facecolor=cfg.color_visual, edgecolor=cfg.edge_color, label="Visual"),
                Patch(facecolor=cfg.color_carrier, edgecolor=cfg.edge_color, label="Carrier / normal"),
            ],
            loc='lower right', fontsize=cfg.font_size_label - 1
        )

        plt.tight_layout()

        # 파일 저장
        if save_path:
            plt.savefig(save_path, dpi=cfg.dpi, bbox_inches='tight', facecolor='white')

        # 이미지 반환
        buf = io.BytesIO()
        plt.savefig(buf, format='png', dpi=cfg.dpi, bbox_inches='tight', facecolor='white')
        buf.seek(0)
        img_base64 = base64.b64encode(buf.read()).decode('utf-8')
        plt.close(fig)
        return img_base64

    def save_to_file(self, predictions: List[PredictionResult], filepath: str, title: str = ""):
        """파일로 저장"""
        self.draw(predictions, title=title, save_path=filepath)

    def get_base64_image(self, predictions: List[PredictionResult], title: str = "") -> str:
        """Base64 이미지 반환"""
        return self.draw(predictions, title=title)
