#!/usr/bin/env python3

from wurqlib.media.overlays import AUDIO_RATE

#============================================

def encoder_args(profile: dict) -> list:
	return [
		'-c:v', profile['video_codec'],
		'-preset', profile['preset'],
		'-crf', str(profile['crf']),
		'-pix_fmt', profile['pixel_format'],
		'-r', str(profile['fps']),
		'-c:a', profile['audio_codec'],
		'-ar', str(AUDIO_RATE),
		'-ac', '2',
	]

#============================================

def segment_command(ffmpeg: str, spec: dict, profile: dict, out_file: str) -> list:
	cmd = [ffmpeg, '-y', '-hide_banner']
	for input_args in spec['inputs']:
		cmd += input_args
	cmd += ['-filter_complex', spec['graph'].render()]
	cmd += ['-map', f"[{spec['video']}]", '-map', f"[{spec['audio']}]"]
	if spec.get('duration') is not None:
		cmd += ['-t', str(spec['duration'])]
	else:
		cmd += ['-shortest']
	cmd += encoder_args(profile)
	cmd += [out_file]
	return cmd

#============================================

def concat_command(ffmpeg: str, manifest_file: str, out_file: str) -> list:
	return [
		ffmpeg, '-y', '-hide_banner',
		'-f', 'concat', '-safe', '0',
		'-i', manifest_file,
		'-c', 'copy',
		'-avoid_negative_ts', 'make_zero',
		out_file,
	]

#============================================

def version_command(ffmpeg: str) -> list:
	return [ffmpeg, '-hide_banner', '-version']
