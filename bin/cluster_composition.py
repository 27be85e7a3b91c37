# (C) 2024, Maria Schreiber, MIT license
"""
Composition of clusters built from reads of several samples. Reads must have
been labeled with -addtofasta before clustering, so the sample label is the
start of the query identifier in the .uc file.

Two reports are available:
    percentage  - share of each label in every cluster
    uniqueness  - number of clusters made of a single label, and number of
                  clusters shared between labels
"""
import re
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from uc_parser import (ConfigurationError, EmptyClusterError, cluster_sort_key,
                       members_before_summary, read_uc, warn)

STATUS_TOKENS = {'0', '*'}
ALIGNMENT_TOKEN = re.compile(r'=\w*|\w+|\*')


def validate_labels(labels):
    if not labels:
        raise ConfigurationError('no labels declared!')
    if any(not label for label in labels):
        raise ConfigurationError('labels must not be empty')
    if len(set(labels)) != len(labels):
        raise ConfigurationError(f'labels must be unique: {" ".join(labels)}')
    return list(labels)


def carries_label(record, label):
    """
    True if the read of a S/H record comes from the sample with this label.

    The status token must be '0' or '*', the alignment token '=', '=word', a
    word or '*', and the query must start with the label followed by a
    non-digit (or nothing), so label 'A' matches 'Aread1' but not 'A1read'.
    """
    if record.status not in STATUS_TOKENS:
        return False
    if not ALIGNMENT_TOKEN.fullmatch(record.alignment):
        return False
    if not record.query.startswith(label):
        return False
    return not record.query[len(label):len(label) + 1].isdigit()


def load_clusters(uc_file):
    """Cluster number -> S/H records, read up to the first C record."""
    return members_before_summary(read_uc(uc_file), uc_file)


def label_counts(clusters, labels):
    """DataFrame of read counts, one row per cluster (numeric order), one column per label."""
    order = sorted(clusters, key=cluster_sort_key)
    counts = pd.DataFrame(0, index=pd.Index(order, name='cluster'), columns=labels, dtype=int)
    for cluster in order:
        for label in labels:
            counts.at[cluster, label] = sum(carries_label(r, label) for r in clusters[cluster])
    return counts


def cluster_percentages(cluster, counts):
    """Percentage of each label among the labeled reads of one cluster."""
    total = counts.sum()
    if total == 0:
        raise EmptyClusterError(cluster)
    return counts / total * 100


def percentage_table(clusters, labels, skip_empty=True):
    """
    Long table (cluster, label, percentage). Clusters without any labeled read
    are skipped with a warning, or raise EmptyClusterError if skip_empty is False.
    """
    counts = label_counts(clusters, labels)
    rows = []
    for cluster, row in counts.iterrows():
        try:
            percentages = cluster_percentages(cluster, row)
        except EmptyClusterError as e:
            if not skip_empty:
                raise
            warn(f'{e}, skipped')
            continue
        rows.extend((cluster, label, float(percentages[label])) for label in labels)
    return pd.DataFrame(rows, columns=['cluster', 'label', 'percentage'])


def percentage_rows(table):
    rows = [['cluster', 'label', 'percentage']]
    rows.extend([cluster, label, f'{pct:.4f}'] for cluster, label, pct in table.itertuples(index=False))
    return rows


def uniqueness_counts(clusters, labels):
    """
    Count clusters unique to each label and clusters shared by several labels.
    Returns a list of (composition, number of clusters); an 'unlabeled' entry
    is appended only if some cluster has no labeled read at all.
    """
    counts = label_counts(clusters, labels)
    readhit = np.asarray(counts.to_numpy() > 0, dtype=int)
    labels_per_cluster = readhit.sum(axis=1)
    unique = readhit[labels_per_cluster == 1].sum(axis=0)

    result = [(label, int(n)) for label, n in zip(labels, unique)]
    result.append(('shared', int(np.sum(labels_per_cluster > 1))))
    unlabeled = int(np.sum(labels_per_cluster == 0))
    if unlabeled:
        result.append(('unlabeled', unlabeled))
    return result


def uniqueness_rows(uniqueness):
    rows = [['composition', 'NumClusters']]
    rows.extend([composition, n] for composition, n in uniqueness)
    return rows


def plot_percentages(table, labels, prefix):
    """Heatmap of label percentages per cluster, saved as prefix.png and prefix.svg."""
    if table.empty:
        warn('no cluster with labeled reads, percentage plot not written')
        return
    heat = table.pivot(index='cluster', columns='label', values='percentage')
    heat = heat.reindex(index=table['cluster'].unique(), columns=labels)

    plt.figure(figsize=(max(4, 1.2 * len(labels) + 2), max(3, 0.25 * len(heat))))
    sns.heatmap(
        heat,
        cmap='viridis',
        vmin=0, vmax=100,
        yticklabels=len(heat) <= 50,  # hide if too many
        cbar_kws={'label': 'Percentage of reads'}
    )
    plt.title('Cluster composition by label')
    plt.xlabel('Label')
    plt.ylabel('Cluster')
    plt.tight_layout()
    plt.savefig(f'{prefix}.png')
    plt.savefig(f'{prefix}.svg')
    plt.close()


def plot_uniqueness(uniqueness, prefix):
    """Bar plot of unique and shared cluster counts, saved as prefix.png and prefix.svg."""
    names = [composition for composition, _ in uniqueness]
    values = [n for _, n in uniqueness]
    colors = ['teal' if name in ('shared', 'unlabeled') else 'skyblue' for name in names]

    fig, ax = plt.subplots(figsize=(max(4, len(names) + 2), 4))
    x = np.arange(len(names))
    bars = ax.bar(x, values, color=colors)
    ax.set_xticks(x)
    ax.set_xticklabels(names, rotation=45, ha='right')
    ax.set_ylabel('Number of clusters')
    ax.set_title(f'Unique and shared clusters (Total: {sum(values)})')
    for bar, val in zip(bars, values):
        ax.text(bar.get_x() + bar.get_width() / 2,
                bar.get_height(),
                str(val),
                ha='center', va='bottom',
                fontsize=10, fontweight='bold')
    plt.tight_layout()
    fig.savefig(f'{prefix}.png')
    fig.savefig(f'{prefix}.svg')
    plt.close(fig)
