import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

# Output of bench/bench.py: mapping,scale,ns,bytes
data = pd.read_csv('mapping.csv')

df = data.pivot(index='scale', columns='mapping', values='ns')
ax = sns.lineplot(data=df, dashes=False)
ax.set_ylabel('ns / MapToIndex')
plt.savefig('mapping' + '.png')
plt.close()

df = data[data['mapping'] == 'lookup_table'].set_index('scale')['bytes']
ax = sns.lineplot(data=df)
ax.set_yscale('log', base=2)
ax.set_ylabel('table bytes')
plt.savefig('table_bytes' + '.png')
plt.close()
