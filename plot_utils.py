import os
import calendar
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import seaborn as sns

sns.set(style="whitegrid")
plt.rcParams.update({"figure.dpi": 120})

CATEGORY_PALETTE = {"member": "tab:blue", "casual": "tab:orange"}
MONTH_LABELS = [calendar.month_abbr[m] for m in range(1, 13)]


def save_fig(fname, output_dir):
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, fname)
    plt.tight_layout()
    plt.savefig(path)
    plt.close()
    return path
