from jax import random

from lhcube import LatinHypercubeSampler


def main():
    sampler = LatinHypercubeSampler(point_count=20,
                                    dimension_count=3,
                                    scale=(0., 1.),
                                    overrides=[(2, 10., 20.)],
                                    jitter=[0, 2],
                                    headings=['alpha', 'beta', 'temperature'])
    sample = sampler(random.PRNGKey(42))
    sampler.summary(sample)
    print(sampler.to_table(sample).getvalue())
    sampler.plot_samples(sample)


if __name__ == '__main__':
    main()
